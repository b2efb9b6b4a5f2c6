from fastapi import APIRouter, HTTPException, Request

from controllers.model_controller import config_check, model_file_types, model_profile, models_status, system_info

router = APIRouter(prefix="/api")


@router.get("/config-check")
async def config_check_route(request: Request):
	return await config_check(request)


@router.get("/models/status")
async def models_status_route(request: Request):
	"""Return availability for every routable model."""
	try:
		return await models_status(request)
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/models/{model}/file-types")
async def model_file_types_route(request: Request, model: str):
	try:
		return await model_file_types(request, model)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/models/{model}")
async def model_profile_route(request: Request, model: str):
	try:
		return await model_profile(request, model)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/system/info")
async def system_info_route(request: Request):
	return await system_info(request)
