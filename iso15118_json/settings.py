from typing import Optional

import environs

from iso15118_json.exceptions import InvalidSettingsValueError
from iso15118_json.messages.enums import CardinalityPolicy


class SettingKey:
    MESSAGE_LOG_JSON = "MESSAGE_LOG_JSON"
    CARDINALITY_POLICY = "CARDINALITY_POLICY"
    LOG_LEVEL = "LOG_LEVEL"


# Defaults apply until load_shared_settings() is called
shared_settings = {
    SettingKey.MESSAGE_LOG_JSON: False,
    SettingKey.CARDINALITY_POLICY: CardinalityPolicy.ENFORCE,
    SettingKey.LOG_LEVEL: "INFO",
}


def load_shared_settings(env_path: Optional[str] = None):
    env = environs.Env(eager=False)
    env.read_env(path=env_path)  # read .env file, if it exists

    policy = env.str("CARDINALITY_POLICY", default=CardinalityPolicy.ENFORCE.value)
    try:
        cardinality_policy = CardinalityPolicy(policy.strip().lower())
    except ValueError as exc:
        raise InvalidSettingsValueError(
            "shared", SettingKey.CARDINALITY_POLICY, policy
        ) from exc

    settings = {
        SettingKey.MESSAGE_LOG_JSON: env.bool("MESSAGE_LOG_JSON", default=False),
        SettingKey.CARDINALITY_POLICY: cardinality_policy,
        SettingKey.LOG_LEVEL: env.str("LOG_LEVEL", default="INFO").upper(),
    }
    env.seal()  # raise all errors at once, if any
    shared_settings.update(settings)
