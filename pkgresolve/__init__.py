"""pkgresolve - 包管理器依赖解析核心"""

__version__ = "0.1.0"
