# backend/imagefetch/shared/logging_config.py
"""
日志配置模块
统一管理3类日志：
1. fetch_process/ - 图片获取过程日志（事件驱动）
2. error/ - 错误日志（Infrastructure层直接调用）
3. performance/ - 性能监控日志（Infrastructure层直接调用）

文件命名格式：{日期}_{日志类型}.log
例如：2025-11-30_fetch_process.log
"""

import logging.config
import logging.handlers
from pathlib import Path
from datetime import datetime
from typing import Optional

LOG_TYPES = {
    # 日志类型: (logger 名称, 保留天数)
    'fetch_process': ('domain.fetch_process', 30),
    'error': ('infrastructure.error', 30),
    'performance': ('infrastructure.perf', 7),
}


def setup_logging(log_root_dir: Optional[Path] = None, console_level: str = 'INFO') -> Path:
    """
    初始化并配置所有logger
    应在应用启动时调用：setup_logging()

    参数:
        log_root_dir: 日志根目录，默认 backend/logs/
        console_level: 控制台输出级别

    返回:
        实际使用的日志根目录
    """
    if log_root_dir is None:
        backend_dir = Path(__file__).resolve().parent.parent.parent
        log_root_dir = backend_dir / 'logs'
    log_root_dir = Path(log_root_dir)

    # 确保所有目录存在
    log_dirs = {}
    for log_type in LOG_TYPES:
        log_dirs[log_type] = log_root_dir / log_type
        log_dirs[log_type].mkdir(parents=True, exist_ok=True)

    # 当前日期（用于初始文件名）
    today = datetime.now().strftime('%Y-%m-%d')

    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
            'level': console_level
        }
    }
    for log_type, (_, backup_count) in LOG_TYPES.items():
        handlers[f'{log_type}_file'] = {
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'filename': str(log_dirs[log_type] / f'{today}_{log_type}.log'),
            'when': 'MIDNIGHT',         # 每天午夜切换
            'interval': 1,              # 间隔1天
            'backupCount': backup_count,
            'encoding': 'utf-8',
            'formatter': 'json'
        }

    LOGGING_CONFIG = {
        'version': 1,
        'disable_existing_loggers': False,

        # ==================== 格式化器 ====================
        'formatters': {
            'json': {
                '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s',
                'timestamp': True
            },
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },

        # ==================== 处理器 ====================
        'handlers': handlers,

        # ==================== Logger配置 ====================
        'loggers': {
            # ---------- 业务日志Logger（由EventHandler使用） ----------
            'domain.fetch_process': {
                'handlers': ['fetch_process_file', 'console'],
                'level': 'INFO',
                'propagate': False
            },

            # ---------- 技术日志Logger（Infrastructure层直接使用） ----------
            'infrastructure.error': {
                'handlers': ['error_file', 'console'],
                'level': 'WARNING',
                'propagate': False
            },
            'infrastructure.perf': {
                'handlers': ['performance_file'],
                'level': 'INFO',
                'propagate': False
            }
        },

        # ==================== 根Logger（兜底） ====================
        'root': {
            'level': 'INFO',
            'handlers': ['console']
        }
    }

    logging.config.dictConfig(LOGGING_CONFIG)

    # 自定义文件命名（实现日期前缀命名）
    _setup_custom_namer()

    logger = logging.getLogger('domain.fetch_process')
    logger.info("日志系统初始化完成", extra={
        'log_root_dir': str(log_root_dir),
        'directories': {log_type: str(path) for log_type, path in log_dirs.items()}
    })
    return log_root_dir


def date_prefixed_name(default_name: str) -> str:
    """
    将TimedRotatingFileHandler的默认命名转换为日期前缀格式

    default_name示例：
    /path/to/logs/error/2025-11-30_error.log.2025-11-29

    转换为：
    /path/to/logs/error/2025-11-29_error.log
    """
    path = Path(default_name)
    dir_name = path.parent
    base_name = path.name

    parts = base_name.split('.')
    # 格式：2025-11-30_error.log.2025-11-29
    if len(parts) == 3 and parts[1] == 'log' and '_' in parts[0]:
        log_type = parts[0].split('_', 1)[1]
        date_suffix = parts[2]
        return str(dir_name / f"{date_suffix}_{log_type}.log")

    return default_name


def _setup_custom_namer():
    """为所有TimedRotatingFileHandler设置日期前缀命名规则"""
    for logger_name, _ in LOG_TYPES.values():
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers:
            if isinstance(handler, logging.handlers.TimedRotatingFileHandler):
                handler.namer = date_prefixed_name


# ==================== 便捷获取Logger的函数 ====================

def get_fetch_process_logger() -> logging.Logger:
    """获取图片获取过程日志Logger（EventHandler使用）"""
    return logging.getLogger('domain.fetch_process')


def get_error_logger() -> logging.Logger:
    """获取错误日志Logger（Infrastructure层使用）"""
    return logging.getLogger('infrastructure.error')


def get_performance_logger() -> logging.Logger:
    """获取性能监控日志Logger（Infrastructure层使用）"""
    return logging.getLogger('infrastructure.perf')
