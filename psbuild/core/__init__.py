"""核心层：平台探测、工具链校验、数据模型、配置、异常"""
