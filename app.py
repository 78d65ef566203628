from flask import Flask, jsonify

from config import Config
from fleet_routes import fleet_bp
from fleet_store import FleetStore
from logging_config import logger
from storage import StorageGateway


def create_app(store=None):
    """Build the Flask app around an explicit FleetStore.

    Args:
        store: FleetStore to serve. Defaults to one backed by Config.FLEET_DB.
    """
    app = Flask(__name__)
    app.secret_key = Config.FLASK_SECRET_KEY

    if store is None:
        store = FleetStore(StorageGateway(Config.FLEET_DB))
    store.load()
    app.extensions['fleet_store'] = store

    app.register_blueprint(fleet_bp)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok', 'equipment': len(store.equipment)})

    logger.info(f"Equipment calculator ready: {len(store.equipment)} records loaded")
    return app


if __name__ == '__main__':
    create_app().run(debug=Config.DEBUG, port=Config.PORT)
