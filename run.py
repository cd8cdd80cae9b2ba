import os

from ecommerce_admin import create_app
from ecommerce_admin.models import db

app = create_app(os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=app.config.get('DEBUG', False), port=int(os.getenv('PORT', 5001)))
