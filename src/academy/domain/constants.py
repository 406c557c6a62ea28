ENV_PREFIX = "ACADEMY_"
"""
Prefix of the environment variables read by
:meth:`ConfigurationFactory.set_from_env <academy.web.deployment.configuration.ConfigurationFactory.set_from_env>`.
"""

HEADER_AUTHORIZATION_KEY = "Authorization"

DB_PATH_ENV = f"{ENV_PREFIX}DB_PATH"
"""
Environment variable pointing to the root folder of the local store, also used by the `academy migrate`
command.
"""

DEVELOPMENT = "development"
