import logging

from iso15118_json.settings import SettingKey, shared_settings

TRACE = logging.DEBUG - 5


def _init_logger():
    logging.getLogger().setLevel(shared_settings[SettingKey.LOG_LEVEL])

    # An extra logging level if required, e.g. to dump every (de)serialised
    # message without flooding the debug output.
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)

    level_name = "TRACE"
    logging.addLevelName(TRACE, level_name)
    setattr(logging, level_name, TRACE)
    setattr(logging.getLoggerClass(), level_name.lower(), trace)
