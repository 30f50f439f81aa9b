from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Flask-Migrate setup, bound to the app in create_app
migrate = Migrate()
