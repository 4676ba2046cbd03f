"""服务层：原生构建 / 托管发布 / 打包 / 开发启动 各阶段及流水线"""
