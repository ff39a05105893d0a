#!/usr/bin/env python3

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from biblio.routes import api
from biblio.configs import OPTIONS, CORS_ORIGINS
from biblio import __version__ as VERSION

app = FastAPI(
    title="Biblio API",
    description="Biblio: catalog and circulation for a lending library",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api.router, prefix="/v1/api")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("biblio.app:app", **OPTIONS)
