from importlib.resources import files


# app/data 내부 정적 파일 접근
def pkg_data_path(rel: str):
    return files("app.data") / rel
