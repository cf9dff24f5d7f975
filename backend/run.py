from imagefetch import create_app
from imagefetch.shared.logging_config import setup_logging
from imagefetch.shared.event_bus import EventBus
from imagefetch.shared.event_handlers.logging_handler import LoggingEventHandler
from imagefetch.image.view.image_fetch_view import init_image_fetch  # 导入注入函数
from imagefetch.image.domain.value_objects.fetch_config import ImageFetchConfig

# 初始化日志系统
setup_logging()

app = create_app()

# 创建事件总线
event_bus = EventBus()

# 注册业务日志EventHandler
logging_handler = LoggingEventHandler()
event_bus.subscribe_to_all(logging_handler.handle)

# 组装编排服务并注入 EventBus
init_image_fetch(event_bus=event_bus, config=ImageFetchConfig.from_env())


if __name__ == '__main__':
    app.run(debug=True, port=5000)
