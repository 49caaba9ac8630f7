# storefront/main.py
from fastapi import FastAPI

from .catalog import catalog_router


app = FastAPI(
    title="Storefront catalog",
    description=(
        "Serves the shopper-facing catalog view of a generated storefront: "
        "home page sections by category and a filtered, sorted, paginated "
        "list of all products, derived from the store's public commerce API."
    ),
    version="1.0.0",
)


@app.get("/")
def health_check():
    return {"status": "ok", "message": "Storefront catalog live"}


app.include_router(catalog_router)
