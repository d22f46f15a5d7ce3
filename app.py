"""WSGI entry point.

    gunicorn app:app
    flask --app app init-db
"""

from tradehouse import create_app
from tradehouse.extensions import db

app = create_app()


if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000)
