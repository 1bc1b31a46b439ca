"""
Folio
=====

Run with:
    python app.py

Visit:
    http://localhost:5000        - Homepage
    http://localhost:5000/admin  - Admin panel
"""

from flask import Flask

from folio import Folio
from folio.core.config import Config

app = Flask(__name__)
app.config['SECRET_KEY'] = Config.SECRET_KEY

# Reads BACKEND_URL / BACKEND_API_KEY and registers every module
folio = Folio(app)


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Folio")
    print("=" * 60)
    print(f"Homepage:        http://localhost:{Config.port}")
    print(f"Admin Panel:     http://localhost:{Config.port}/admin")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True)
