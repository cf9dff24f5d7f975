from flask import Flask
from flask_cors import CORS
from .image.view.image_fetch_view import bp as images_bp


def create_app():
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes
    app.json.ensure_ascii = False  # 商品名多为韩文/中文，保持原样输出

    app.register_blueprint(images_bp)
    return app
