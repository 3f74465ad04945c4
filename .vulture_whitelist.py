# vulture whitelist for false positives
# These are called by frameworks rather than by fanatic itself
# noqa: F821 - This file intentionally uses undefined _ as placeholder for vulture

_ = type("_", (), {})()  # Dummy object for vulture whitelisting

# Pydantic validators are called by framework
_.model_validator  # unused method  # noqa: B018
_.field_validator  # unused method  # noqa: B018

# http.server dispatches on method name
_.do_GET  # unused method  # noqa: B018
_.log_message  # unused method  # noqa: B018
_.daemon_threads  # unused attribute  # noqa: B018

# Package-level lazy module loader
_.__getattr__  # unused function  # noqa: B018
