"""
常量和枚举定义
"""
from enum import Enum


class ActionKind(str, Enum):
    """任务命中后执行的动作"""
    CLICK_SELF = "click_self"  # 点击匹配到的区域
    CLICK_RECT = "click_rect"  # 点击配置的固定区域
    CLICK_RAND = "click_rand"  # 在整个窗口内随机点击
    DO_NOTHING = "do_nothing"
    STOP = "stop"
    PRINT_WINDOW = "print_window"  # 截图导出

    @property
    def is_click(self) -> bool:
        return self in (ActionKind.CLICK_SELF, ActionKind.CLICK_RECT, ActionKind.CLICK_RAND)


class AlgorithmKind(str, Enum):
    """识别器本次使用的算法"""
    JUST_RETURN = "just_return"  # 无模板，直接命中
    MATCH_TEMPLATE = "match_template"
    COMPARE_HIST = "compare_hist"  # 缓存区域直方图比对
    UNKNOWN = "unknown"


# 模拟器默认分辨率
DEFAULT_WINDOW_WIDTH = 1280
DEFAULT_WINDOW_HEIGHT = 720

# 截图导出时裁掉的边框宽度（像素）
SNAPSHOT_BORDER_INSET = 5

SCREENSHOT_DIR = "screenshot"
