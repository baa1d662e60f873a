"""TaskPilot Core -- 领域模型、输入校验与持久化"""
