"""通用工具：子进程执行、文件系统、日志、YAML 读写"""
