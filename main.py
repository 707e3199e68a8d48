import uvicorn

from league.core.config import settings

if __name__ == "__main__":
    uvicorn.run("league.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
