import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photometa import config
from photometa.routers.metadata import router as metadata_router

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)


def create_app() -> FastAPI:
	app = FastAPI(title="PhotoMeta - Image Metadata API", version="0.1.0")

	app.add_middleware(
		CORSMiddleware,
		allow_origins=config.CORS_ORIGINS,
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	# Routers
	app.include_router(metadata_router)

	return app


app = create_app()


if __name__ == "__main__":
	# Local dev server: uvicorn photometa.main:app --reload
	import uvicorn

	uvicorn.run("photometa.main:app", host="0.0.0.0", port=8000, reload=True)
