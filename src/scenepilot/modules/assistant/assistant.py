"""
自动化助手：任务调度主循环与线程安全的控制接口

循环线程除了在自身的可中断等待中，始终持有 self._lock；
外部调用 start/stop/bind_target 等方法时获取同一把锁并通过条件变量唤醒循环。
"""
from __future__ import annotations

import random
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ...core.config import Settings, settings
from ...core.constants import ActionKind, AlgorithmKind
from ...core.logger import logger
from ..emu.protocols import Target
from ..emu.target import build_adb_target
from ..graph.loader import GraphConfig
from ..graph.types import Options, Rect, TargetProfile, Task
from ..vision.identify import Identify
from ..vision.protocols import Matcher, MatchOutcome
from ..vision.utils import is_empty
from .session import RunSession
from .snapshot import export_frame, timestamped_path

TargetFactory = Callable[[TargetProfile, Options], Target]


def accepts(task: Task, outcome: MatchOutcome) -> bool:
    """按识别算法判断是否命中"""
    if outcome.kind == AlgorithmKind.JUST_RETURN:
        return True
    if outcome.kind == AlgorithmKind.MATCH_TEMPLATE:
        return outcome.score >= task.threshold
    if outcome.kind == AlgorithmKind.COMPARE_HIST:
        return outcome.score >= task.cache_threshold
    return False


class Assistant:
    def __init__(
        self,
        config: GraphConfig,
        matcher: Matcher,
        *,
        target_factory: Optional[TargetFactory] = None,
        resource_dir: Optional[str] = None,
        start_worker: bool = True,
    ) -> None:
        self.config = config
        self.matcher = matcher
        self._target_factory = target_factory or build_adb_target
        self._target: Optional[Target] = None

        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self.session = RunSession(self._cond)
        self._thread_exit = False
        self.logger = logger.bind(module="Assistant")

        self._register_references(resource_dir if resource_dir is not None else settings.resource_dir)
        self.matcher.set_cache_enabled(config.options.identify_cache)

        self._thread: Optional[threading.Thread] = None
        if start_worker:
            self._thread = threading.Thread(target=self._working_proc, name="assistant-loop", daemon=True)
            self._thread.start()

    def _register_references(self, resource_dir: str) -> None:
        for task in self.config.tasks:
            path = None if task.template is None else str(Path(resource_dir) / task.template)
            self.matcher.register_reference(task.name, path)

    # ---- 控制接口 ----

    def bind_target(self, name: Optional[str] = None) -> Optional[str]:
        """绑定目标设备

        name 为空时按配置顺序逐个尝试，返回绑定成功的目标名，全部失败返回 None。
        """
        self.logger.debug(f"bind_target | {name or '<auto>'}")
        self.stop()

        with self._lock:
            self._target = None
            self.session.target_bound = False
            self.session.target_name = None

            if name:
                profile = self.config.targets.get(name)
                if profile is None:
                    self.logger.warning(f"未配置的目标: {name}")
                    return None
                profiles = [profile]
            else:
                profiles = list(self.config.targets.values())

            for profile in profiles:
                target = self._target_factory(profile, self.config.options)
                if not target.is_bound():
                    self.logger.debug(f"目标不可用: {profile.name}")
                    continue
                if target.restore_window() and target.resize_window():
                    self._target = target
                    self.session.target_bound = True
                    self.session.target_name = profile.name
                    self.logger.info(f"已绑定目标: {profile.name}")
                    return profile.name
                self.logger.warning(f"目标无法调整到预期尺寸: {profile.name}")

            self.logger.warning("没有可绑定的目标")
            return None

    def start(self, entry_task: str) -> bool:
        self.logger.debug(f"start | {entry_task}")
        with self._lock:
            if self.session.running or not self.session.target_bound:
                self.logger.warning("已在运行或未绑定目标，忽略 start")
                return False
            idx = self.config.tasks.index_of(entry_task)
            if idx is None:
                self.logger.error(f"未知任务: {entry_task}")
                return False

            self.config.reset_all_exec_counts()
            self.matcher.clear_cache()
            self.session.begin([idx])
            self.logger.info(f"开始运行，入口任务: {entry_task}")
            return True

    def stop(self, blocking: bool = True) -> None:
        """停止运行

        blocking=True 为外部调用：获取锁并重置执行次数；
        blocking=False 仅供循环线程在已持有锁时调用，执行次数留给下次 start 重置。
        """
        self.logger.debug(f"stop | {'block' if blocking else 'non block'}")
        if blocking:
            with self._lock:
                self.config.reset_all_exec_counts()
                self._stop_locked()
        else:
            self._stop_locked()

    def _stop_locked(self) -> None:
        if self.session.running:
            self.logger.info("停止运行")
        self.session.cancel()
        self.matcher.clear_cache()

    def get_parameter(self, scope: str, key: str) -> Optional[str]:
        with self._lock:
            return self.config.get_param(scope, key)

    def set_parameter(self, scope: str, key: str, value: str) -> bool:
        self.logger.debug(f"set_parameter | {scope} {key} {value}")
        with self._lock:
            ok = self.config.set_param(scope, key, value)
            if ok and scope == "options" and key == "identify_cache":
                self.matcher.set_cache_enabled(self.config.options.identify_cache)
            return ok

    def export_snapshot(self, path: str | Path, blocking: bool = True) -> bool:
        self.logger.debug(f"export_snapshot | {path} {'block' if blocking else 'non block'}")
        if blocking:
            with self._lock:
                return self._print_window(path)
        return self._print_window(path)

    def _print_window(self, path: str | Path) -> bool:
        if self._target is None:
            self.logger.error("未绑定目标，无法截图")
            return False
        opts = self.config.options
        return export_frame(self._target, path, opts.window_width, opts.window_height)

    def status(self) -> Dict[str, object]:
        with self._lock:
            return {
                "running": self.session.running,
                "target": self.session.target_name,
                "candidates": self.candidate_names(),
                "exec_counts": {t.name: t.exec_count for t in self.config.tasks},
            }

    def candidate_names(self) -> List[str]:
        return self.config.tasks.names(self.session.candidates)

    def shutdown(self) -> None:
        """结束循环线程并恢复目标窗口"""
        with self._lock:
            self._thread_exit = True
            self.session.cancel()
            target = self._target

        if self._thread is not None and self._thread.is_alive():
            self._thread.join()
        self._thread = None

        if target is not None:
            target.restore_window()
        self.logger.info("助手已关闭")

    # ---- 主循环 ----

    def _working_proc(self) -> None:
        while True:
            with self._lock:
                if self._thread_exit:
                    break
                if self.session.running:
                    try:
                        self.run_cycle()
                    except Exception:
                        self.logger.exception("循环异常，停止运行")
                        self._stop_locked()
                else:
                    self._cond.wait()

    def run_cycle(self) -> None:
        """一次 截图 → 匹配 → 执行 → 等待 循环，调用方需持有锁"""
        opts = self.config.options
        target = self._target

        frame = target.get_frame() if target is not None else None
        if is_empty(frame):
            self.logger.error("无法获取截图，停止运行")
            self._stop_locked()
            return

        height, width = frame.shape[:2]
        if width < opts.window_width or height < opts.window_height:
            self.logger.info(f"窗口画面过小({width}x{height})，尝试恢复窗口")
            target.restore_window()
            self.session.wait(opts.identify_delay)
            return

        matched = self._match(frame)
        if matched is not None:
            task, rect = matched
            if not self._execute(task, rect):
                return

        self.session.wait(opts.identify_delay)

    def _match(self, frame: np.ndarray) -> Optional[Tuple[Task, Optional[Rect]]]:
        # 按顺序逐个匹配，第一个命中的即为结果
        for idx in self.session.candidates:
            task = self.config.tasks[idx]
            outcome = self.matcher.find(frame, task.name, task.threshold)
            self.logger.debug(f"{task.name} 算法: {outcome.kind.value} 得分: {outcome.score:.3f}")
            if accepts(task, outcome):
                return task, outcome.rect
        return None

    def _execute(self, task: Task, rect: Optional[Rect]) -> bool:
        """执行命中的任务，返回 False 表示本轮被中断或运行已停止"""
        opts = self.config.options
        self.logger.info(f"***Matched*** {task.name} 动作: {task.action.value}")

        if task.pre_delay > 0:
            self.logger.debug(f"PreDelay {task.pre_delay}")
            if self.session.wait(task.pre_delay):
                return False

        if task.max_executions is not None:
            self.logger.debug(f"CurTimes: {task.exec_count} MaxTimes: {task.max_executions}")

        if task.limit_reached:
            self.logger.info(f"{task.name} 已达到执行次数上限")
            return self._install_next(task, task.exceeded_next)

        if task.action.is_click and opts.control_delay_upper != 0:
            delay = random.randint(opts.control_delay_lower, opts.control_delay_upper)
            self.logger.info(f"随机延时 {delay} ms")
            if self.session.wait(delay):
                return False

        if not self._dispatch(task, rect):
            return False

        task.exec_count += 1

        # 命中该任务说明之前某些任务的执行其实没生效，给它们的次数减一
        for idx in task.counter_debits:
            other = self.config.tasks[idx]
            other.exec_count -= 1
            self.logger.debug(f"Reduce exec times {other.name} {other.exec_count}")

        if task.rear_delay > 0:
            self.logger.debug(f"RearDelay {task.rear_delay}")
            if self.session.wait(task.rear_delay):
                return False

        return self._install_next(task, task.next)

    def _dispatch(self, task: Task, rect: Optional[Rect]) -> bool:
        target = self._target
        opts = self.config.options
        action = task.action

        if action == ActionKind.CLICK_SELF:
            if rect is None:
                self.logger.warning(f"{task.name} 没有匹配区域，跳过点击")
            else:
                target.click(rect)
        elif action == ActionKind.CLICK_RECT:
            target.click(task.fixed_region)
        elif action == ActionKind.CLICK_RAND:
            target.click(target.get_window_bounds())
        elif action == ActionKind.DO_NOTHING:
            pass
        elif action == ActionKind.STOP:
            self.logger.info(f"{task.name} 为停止任务")
            self._stop_locked()
            return False
        elif action == ActionKind.PRINT_WINDOW:
            if opts.print_window:
                # 结算界面掉落物有动画，等一会再截
                self.logger.info(f"准备截图，延时 {opts.print_window_delay} ms")
                if self.session.wait(opts.print_window_delay):
                    return False
                self._print_window(timestamped_path(opts.screenshot_dir))
        else:
            self.logger.error(f"未知动作类型: {action}")
        return True

    def _install_next(self, task: Task, indices: Tuple[int, ...]) -> bool:
        """装入下一组候选任务，为空时在循环内停止运行"""
        if not indices:
            self.logger.warning(f"{task.name} 没有后续任务，停止运行")
            self._stop_locked()
            return False
        self.session.candidates = list(indices)
        self._log_next()
        return True

    def _log_next(self) -> None:
        self.logger.debug(f"Next: {','.join(self.candidate_names())}")


def build_assistant(cfg: Settings = settings, **kwargs) -> Assistant:
    """按 settings 加载任务图并创建助手"""
    config = GraphConfig.from_file(cfg.config_path)
    matcher = Identify(use_cache=config.options.identify_cache)
    return Assistant(config, matcher, resource_dir=cfg.resource_dir, **kwargs)


__all__ = ["Assistant", "accepts", "build_assistant"]
