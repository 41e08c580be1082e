"""
助手控制API
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ...assistant import Assistant, timestamped_path
from ..deps import get_assistant


router = APIRouter(prefix="/api/assistant", tags=["assistant"])


class BindRequest(BaseModel):
    """绑定目标，name 为空时自动探测"""
    name: Optional[str] = None


class StartRequest(BaseModel):
    task: str


class ParamUpdate(BaseModel):
    scope: str
    key: str
    value: str


class SnapshotRequest(BaseModel):
    path: Optional[str] = None


@router.get("/status")
def get_status(assistant: Assistant = Depends(get_assistant)):
    return assistant.status()


@router.post("/bind")
def bind_target(req: BindRequest, assistant: Assistant = Depends(get_assistant)):
    name = assistant.bind_target(req.name)
    if name is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="没有可绑定的目标")
    return {"target": name}


@router.post("/start")
def start(req: StartRequest, assistant: Assistant = Depends(get_assistant)):
    if not assistant.start(req.task):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="启动失败：已在运行、未绑定目标或任务不存在",
        )
    return {"running": True, "task": req.task}


@router.post("/stop")
def stop(assistant: Assistant = Depends(get_assistant)):
    assistant.stop()
    return {"running": False}


@router.get("/param")
def get_param(scope: str, key: str, assistant: Assistant = Depends(get_assistant)):
    value = assistant.get_parameter(scope, key)
    if value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="参数不存在")
    return {"scope": scope, "key": key, "value": value}


@router.put("/param")
def set_param(req: ParamUpdate, assistant: Assistant = Depends(get_assistant)):
    if not assistant.set_parameter(req.scope, req.key, req.value):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="参数不存在或值无效")
    return {"scope": req.scope, "key": req.key, "value": req.value}


@router.post("/snapshot")
def snapshot(req: SnapshotRequest, assistant: Assistant = Depends(get_assistant)):
    path = req.path or str(timestamped_path(assistant.config.options.screenshot_dir))
    if not assistant.export_snapshot(path):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="截图失败")
    return {"path": path}
