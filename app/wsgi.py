from app.dirikita import create_app

app = create_app()
