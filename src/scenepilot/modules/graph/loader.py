"""
任务图配置加载器

从 YAML 文件加载全局选项、目标模拟器列表与任务图，使用 pydantic 校验结构，
并把任务间的跳转名解析为任务图下标。加载后仅 exec_count 与少量运行期参数可变。
"""
from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ...core.constants import ActionKind
from ...core.logger import logger
from .graph import TaskGraph
from .types import Options, Rect, TargetProfile, Task


class GraphConfigError(ValueError):
    """任务图配置无效"""
    pass


class OptionsModel(BaseModel):
    identify_delay: int = Field(default=1000, ge=0)
    identify_cache: bool = True
    control_delay_lower: int = Field(default=0, ge=0)
    control_delay_upper: int = Field(default=0, ge=0)
    print_window: bool = False
    print_window_delay: int = Field(default=0, ge=0)
    window_width: int = Field(default=1280, gt=0)
    window_height: int = Field(default=720, gt=0)
    screenshot_dir: str = "screenshot"

    @model_validator(mode="after")
    def _check_delay_range(self) -> "OptionsModel":
        if self.control_delay_upper and self.control_delay_lower > self.control_delay_upper:
            raise ValueError("control_delay_lower 不能大于 control_delay_upper")
        return self


class TargetModel(BaseModel):
    adb_addr: str
    x_offset: int = 0
    y_offset: int = 0


class TaskModel(BaseModel):
    action: ActionKind
    template: Optional[str] = None
    threshold: float = Field(default=0.9, ge=0.0, le=1.0)
    cache_threshold: float = Field(default=0.9, ge=0.0, le=1.0)
    fixed_region: Optional[Tuple[int, int, int, int]] = None  # x,y,w,h
    pre_delay: int = Field(default=0, ge=0)
    rear_delay: int = Field(default=0, ge=0)
    max_executions: Optional[int] = Field(default=None, ge=0)
    next: List[str] = Field(default_factory=list)
    exceeded_next: List[str] = Field(default_factory=list)
    counter_debits: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_fixed_region(self) -> "TaskModel":
        if self.action == ActionKind.CLICK_RECT and self.fixed_region is None:
            raise ValueError("click_rect 任务必须配置 fixed_region")
        return self


class GraphFileModel(BaseModel):
    options: OptionsModel = Field(default_factory=OptionsModel)
    targets: Dict[str, TargetModel] = Field(default_factory=dict)
    tasks: Dict[str, TaskModel]

    @field_validator("tasks")
    @classmethod
    def _not_empty(cls, v: Dict[str, TaskModel]) -> Dict[str, TaskModel]:
        if not v:
            raise ValueError("tasks 不能为空")
        return v


def _parse_max_executions(value: str) -> Optional[int]:
    text = str(value).strip().lower()
    if text in ("", "none", "inf", "infinite", "unbounded"):
        return None
    number = int(text)
    if number < 0:
        raise ValueError("max_executions 不能为负数")
    return number


class GraphConfig:
    """任务图与全局参数的持有者"""

    def __init__(self) -> None:
        self.options = Options()
        self.targets: Dict[str, TargetProfile] = {}
        self.tasks = TaskGraph()
        self.path: Optional[Path] = None
        self._log = logger.bind(module="GraphConfig")

    @classmethod
    def from_file(cls, path: str | Path) -> "GraphConfig":
        cfg = cls()
        cfg.load(path)
        return cfg

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphConfig":
        cfg = cls()
        cfg._apply(data)
        return cfg

    def load(self, path: str | Path) -> None:
        """加载 YAML 配置文件，失败时抛出 GraphConfigError。"""
        file_path = Path(path)
        if not file_path.exists():
            raise GraphConfigError(f"配置文件不存在: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise GraphConfigError(f"YAML 解析失败: {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise GraphConfigError(f"配置格式错误（非 dict）: {file_path}")

        self._apply(data)
        self.path = file_path
        self._log.info(f"配置已加载: {file_path}, 任务数={len(self.tasks)}, 目标数={len(self.targets)}")

    def _apply(self, data: Dict[str, Any]) -> None:
        try:
            model = GraphFileModel.model_validate(data)
        except ValidationError as e:
            raise GraphConfigError(f"配置校验失败: {e}") from e

        options = Options(**model.options.model_dump())
        targets = {
            name: TargetProfile(name=name, adb_addr=t.adb_addr, x_offset=t.x_offset, y_offset=t.y_offset)
            for name, t in model.targets.items()
        }

        graph = TaskGraph()
        for name, t in model.tasks.items():
            graph.add(Task(
                name=name,
                index=-1,
                action=t.action,
                template=t.template,
                threshold=t.threshold,
                cache_threshold=t.cache_threshold,
                fixed_region=Rect(*t.fixed_region) if t.fixed_region else None,
                pre_delay=t.pre_delay,
                rear_delay=t.rear_delay,
                max_executions=t.max_executions,
            ))

        # 第二遍：解析跳转名为下标，未知任务名在加载期报错
        errors: List[str] = []

        def resolve(owner: str, field_name: str, names: List[str]) -> Tuple[int, ...]:
            indices = []
            for n in names:
                idx = graph.index_of(n)
                if idx is None:
                    errors.append(f"{owner}.{field_name} 引用了不存在的任务: {n}")
                else:
                    indices.append(idx)
            return tuple(indices)

        for name, t in model.tasks.items():
            task = graph.get(name)
            task.next = resolve(name, "next", t.next)
            task.exceeded_next = resolve(name, "exceeded_next", t.exceeded_next)
            task.counter_debits = resolve(name, "counter_debits", t.counter_debits)

        if errors:
            raise GraphConfigError("; ".join(errors))

        self.options = options
        self.targets = targets
        self.tasks = graph

    def reset_all_exec_counts(self) -> None:
        self.tasks.reset_exec_counts()

    def get_param(self, scope: str, key: str) -> Optional[str]:
        """读取运行期参数

        scope:
            - "options": key 为 Options 字段名
            - "task.max_executions" / "task.exec_count": key 为任务名
        """
        if scope == "options":
            if key not in {f.name for f in fields(Options)}:
                self._log.warning(f"未知参数: {scope}.{key}")
                return None
            return str(getattr(self.options, key))

        if scope in ("task.max_executions", "task.exec_count"):
            task = self.tasks.get(key)
            if task is None:
                self._log.warning(f"未知任务: {key}")
                return None
            value = getattr(task, scope.split(".", 1)[1])
            return "inf" if value is None else str(value)

        self._log.warning(f"未知参数作用域: {scope}")
        return None

    def set_param(self, scope: str, key: str, value: str) -> bool:
        """修改运行期参数，成功返回 True"""
        if scope == "options":
            if key not in {f.name for f in fields(Options)}:
                self._log.warning(f"未知参数: {scope}.{key}")
                return False
            merged = {**vars(self.options), key: value}
            try:
                validated = OptionsModel.model_validate(merged)
            except ValidationError as e:
                self._log.warning(f"参数值无效: {scope}.{key}={value}: {e}")
                return False
            setattr(self.options, key, getattr(validated, key))
            return True

        if scope == "task.max_executions":
            task = self.tasks.get(key)
            if task is None:
                self._log.warning(f"未知任务: {key}")
                return False
            try:
                task.max_executions = _parse_max_executions(value)
            except ValueError:
                self._log.warning(f"参数值无效: {scope}.{key}={value}")
                return False
            return True

        self._log.warning(f"参数不可修改: {scope}.{key}")
        return False


__all__ = ["GraphConfig", "GraphConfigError", "GraphFileModel"]
