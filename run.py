"""Development server for the password policy demo application"""
import logging
import os

from password_policy.demo import create_app

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = create_app(os.environ.get('FLASK_CONFIG', 'default'))
    app.run(debug=app.config.get('DEBUG', False), host='127.0.0.1', port=5000)
