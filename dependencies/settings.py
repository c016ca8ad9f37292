from fastapi import Request

from config.settings import Settings


def get_app_settings(request: Request) -> Settings:
    # main.create_app 에서 app.state.settings 로 주입된 설정
    return request.app.state.settings
