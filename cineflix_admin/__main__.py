import logging
import sys

from .config import configure_logging, load_config
from .console import AdminConsole
from .errors import ConfigError, GatewayFailure
from .gateways import CredentialAuth, FirebaseAuth, MongoCatalogStore
from .web import create_app

logger = logging.getLogger(__name__)


def build_auth(config):
    if config.auth_provider == "firebase":
        return FirebaseAuth(config.firebase_api_key)
    return CredentialAuth(config.admin_username, config.admin_password)


def main():
    try:
        config = load_config()
    except ConfigError as e:
        print(f"FATAL: {e}")
        sys.exit(1)

    configure_logging(config.log_level)
    try:
        store = MongoCatalogStore.from_uri(config.mongo_uri, config.mongo_db_name, default_bot_username=config.bot_username)
    except GatewayFailure as e:
        logger.critical("Error connecting to MongoDB: %s. Exiting.", e)
        sys.exit(1)

    console = AdminConsole(build_auth(config), store, default_bot_username=config.bot_username)
    app = create_app(console, config.secret_key)
    app.run(host="0.0.0.0", port=config.port, debug=False)


if __name__ == "__main__":
    main()
