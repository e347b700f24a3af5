# run_server.py
import uvicorn
from correlativos.main import app

if __name__ == "__main__":
    # Behind the dashboard's reverse proxy, which forwards /api/correlativos here
    uvicorn.run(
        app,
        host="127.0.0.1",
        port=3240,
        log_level="info",
        proxy_headers=True,
    )
