"""ASGI handler for serverless deployment."""
from mangum import Mangum

from taskdesk.main import app

handler = Mangum(app, lifespan="off")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
