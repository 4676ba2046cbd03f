"""psbuild — 宿主程序与原生互操作库的跨平台构建 / 打包编排工具"""

__version__ = "0.1.0"
