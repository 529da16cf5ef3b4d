"""Simple development runner that imports the app factory and runs the Flask dev server.
Use this for local testing against the mobile client only.
"""
from universe import create_app

if __name__ == '__main__':
    app = create_app()
    app.init_db()
    app.run(host='0.0.0.0', port=3001, debug=True)
