import os


def _env(name, default, cast=str):
    value = os.environ.get(f"MLPLAYGROUND_{name}")
    if value is None:
        return default
    if cast is bool:
        return value.lower() in ("1", "true", "yes", "on")
    return cast(value)


class Config:
    """应用配置，可通过 MLPLAYGROUND_* 环境变量覆盖"""
    SECRET_KEY = _env("SECRET_KEY", "ml-playground-secret-key")
    HOST = _env("HOST", "0.0.0.0")
    PORT = _env("PORT", 5000, int)
    DEBUG = _env("DEBUG", True, bool)
    LOG_LEVEL = _env("LOG_LEVEL", "DEBUG")

    # K-means 自动运行: 每步间隔(秒)与最大迭代次数
    KMEANS_STEP_DELAY = _env("KMEANS_STEP_DELAY", 1.0, float)
    KMEANS_MAX_ITERATIONS = _env("KMEANS_MAX_ITERATIONS", 100, int)


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    KMEANS_STEP_DELAY = 0.0
