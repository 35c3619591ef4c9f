from client_spine.cli.app import app

app()
