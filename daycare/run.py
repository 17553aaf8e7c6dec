# daycare/run.py
import uvicorn
from dotenv import load_dotenv

load_dotenv()

from daycare import create_app  # noqa: E402

app = create_app()


@app.get("/list-endpoints")
def list_endpoints():
    endpoints = []
    for route in app.router.routes:
        endpoints.append({
            "path": route.path,
            "name": route.name,
            "methods": sorted(getattr(route, "methods", None) or []),
        })
    return {"endpoints": endpoints}


if __name__ == "__main__":
    uvicorn.run("daycare.run:app", host="0.0.0.0", port=8000, reload=True)
