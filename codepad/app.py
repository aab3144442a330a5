# codepad/app.py
from wsgiref.simple_server import make_server
import json
import logging
import re

from codepad.config import get_settings, configure_logging
from codepad.database.database import SessionLocal
from codepad.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from codepad.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from codepad.repositories.sqlalchemy.sqlalchemy_file_repository import SqlalchemyFileRepository
from codepad.services.ownership_guard import OwnershipGuard, coerce_id
from codepad.services.workspace_service import (
    WorkspaceService, ProjectPatch, FilePatch, project_to_dict, file_to_dict
)
from codepad.services.judge_client import JudgeClient
from codepad.services.execution_gateway import ExecutionGateway
from codepad.services.promotion_workflow import PromotionTarget
from codepad.services.editor_service import EditorService
from codepad.services.editor_buffer import Buffer
from codepad.services.profile_service import ProfileService
from codepad.utils.languages import default_scratchpad_name
from codepad.services.exceptions import (
    ValidationError, ResourceNotFoundError, AuthenticationError,
    ExecutionBackendUnavailable, PartialPromotionFailure, StorageError
)

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except ValueError:
        raise ValidationError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object.")
    return data

def get_principal(environ) -> int:
    """
    외부 세션 계층이 인증한 사용자 ID를 X-User-Id 헤더에서 읽습니다.
    """
    user_id = coerce_id(environ.get("HTTP_X_USER_ID"))
    if user_id is None:
        raise AuthenticationError("Missing or invalid 'X-User-Id' header.")
    return user_id

def language_id_from(data, registry):
    if data.get("language_id") is not None:
        return data["language_id"]
    if data.get("language") is not None:
        return registry.to_store_id(data["language"])
    return None

def handle_exception(e):
    error_map = {
        ValidationError: "400 Bad Request",
        AuthenticationError: "401 Unauthorized",
        ResourceNotFoundError: "404 Not Found",
        PartialPromotionFailure: "409 Conflict",
        ExecutionBackendUnavailable: "502 Bad Gateway",
        StorageError: "500 Internal Server Error",
    }
    status = next((error_map[cls] for cls in type(e).__mro__ if cls in error_map), None)
    if status is None:
        logger.exception("Unhandled error while processing request.")
        return "500 Internal Server Error", json.dumps({"error": "Internal server error"})

    body = {"error": str(e)}
    if isinstance(e, PartialPromotionFailure):
        body["project_id"] = e.project_id
    if isinstance(e, ExecutionBackendUnavailable):
        body["error"] = f"Execution failed: {e}"
    return status, json.dumps(body)

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def build_services(db_session, judge_client):
    user_repo = SqlalchemyUserRepository(db_session)
    project_repo = SqlalchemyProjectRepository(db_session)
    file_repo = SqlalchemyFileRepository(db_session)

    guard = OwnershipGuard(project_repo, file_repo)
    workspace_service = WorkspaceService(project_repo, file_repo, guard)
    gateway = ExecutionGateway(judge_client)

    return {
        'workspace': workspace_service,
        'editor': EditorService(workspace_service, gateway),
        'profile': ProfileService(user_repo),
    }

def create_app(session_factory=None, judge_client=None):
    session_factory = session_factory or SessionLocal
    judge_client = judge_client or JudgeClient()

    def application(environ, start_response):
        db_session = session_factory()
        try:
            # 1. 요청 단위로 리포지토리 -> 서비스 생성
            environ['services'] = build_services(db_session, judge_client)

            # 2. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler, path_args = None, []
            for route_method, pattern, route_handler in ROUTES:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                environ['user_id'] = get_principal(environ)
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def run_handler(environ, *args):
    data = get_request_data(environ)
    buffer = Buffer(content=data.get('code') or data.get('source_code') or "", language=data.get('language'))
    result = environ['services']['editor'].run(buffer, data.get('stdin') or "")
    return '200 OK', json.dumps(result.to_dict())

def save_handler(environ, *args):
    data = get_request_data(environ)
    if data.get('file_id') is not None:
        # 연결된 파일 저장: 요청에 없는 필드는 None으로 두어 저장된 값을 유지합니다.
        buffer = Buffer(content=data.get('content'), language=data.get('language'), file_id=data['file_id'])
    else:
        buffer = Buffer(
            content=data.get('content') or "",
            language=data.get('language') or environ['services']['workspace'].registry.default.tag,
        )
    target = None
    if not buffer.is_attached:
        target = PromotionTarget(
            file_name=data['file_name'] if 'file_name' in data else default_scratchpad_name(buffer.language),
            project_id=data.get('project_id'),
            new_project_name=data.get('new_project_name'),
        )
    saved = environ['services']['editor'].save(environ['user_id'], buffer, target)
    return ('200 OK' if buffer.is_attached else '201 Created'), json.dumps({
        "project_id": saved.project_id,
        "file_id": saved.file_id,
        "file_name": saved.file_name,
        "promoted": not buffer.is_attached,
    })

def list_projects_handler(environ, *args):
    projects = environ['services']['workspace'].list_projects(environ['user_id'])
    return '200 OK', json.dumps([project_to_dict(p) for p in projects])

def create_project_handler(environ, *args):
    data = get_request_data(environ)
    project = environ['services']['workspace'].create_project(
        environ['user_id'],
        data.get('project_name', data.get('name')),
        description=data.get('description'),
        language=data.get('language'),
    )
    return '201 Created', json.dumps(project_to_dict(project))

def get_project_handler(environ, project_id):
    project = environ['services']['workspace'].get_project(environ['user_id'], project_id)
    return '200 OK', json.dumps(project_to_dict(project))

def update_project_handler(environ, project_id):
    data = get_request_data(environ)
    patch = ProjectPatch(
        name=data.get('project_name', data.get('name')),
        description=data.get('description'),
        language=data.get('language'),
    )
    project = environ['services']['workspace'].update_project(environ['user_id'], project_id, patch)
    return '200 OK', json.dumps(project_to_dict(project))

def delete_project_handler(environ, project_id):
    environ['services']['workspace'].delete_project(environ['user_id'], project_id)
    return '204 No Content', ''

def list_files_handler(environ, project_id):
    files = environ['services']['workspace'].list_files(environ['user_id'], project_id)
    return '200 OK', json.dumps([file_to_dict(f) for f in files])

def create_file_handler(environ, project_id):
    data = get_request_data(environ)
    workspace = environ['services']['workspace']
    file = workspace.create_file_in_project(
        environ['user_id'], project_id, data.get('file_name'),
        language_id_from(data, workspace.registry), data.get('content'),
    )
    return '201 Created', json.dumps(file_to_dict(file))

def get_file_handler(environ, file_id):
    file = environ['services']['workspace'].get_file(environ['user_id'], file_id)
    return '200 OK', json.dumps(file_to_dict(file))

def update_file_handler(environ, file_id):
    data = get_request_data(environ)
    workspace = environ['services']['workspace']
    patch = FilePatch(
        name=data.get('file_name'),
        language_id=language_id_from(data, workspace.registry),
        content=data.get('content'),
    )
    file = workspace.update_file(environ['user_id'], file_id, patch)
    return '200 OK', json.dumps(file_to_dict(file))

def get_me_handler(environ, *args):
    return '200 OK', json.dumps(environ['services']['profile'].get_profile(environ['user_id']))

def update_theme_handler(environ, *args):
    data = get_request_data(environ)
    profile = environ['services']['profile'].update_theme(environ['user_id'], data.get('theme'))
    return '200 OK', json.dumps(profile)

ROUTES = [
    ('POST', r'^/api/run$', run_handler),
    ('POST', r'^/api/save$', save_handler),
    ('GET', r'^/api/projects$', list_projects_handler),
    ('POST', r'^/api/projects$', create_project_handler),
    ('GET', r'^/api/projects/([0-9]+)$', get_project_handler),
    ('PUT', r'^/api/projects/([0-9]+)$', update_project_handler),
    ('DELETE', r'^/api/projects/([0-9]+)$', delete_project_handler),
    ('GET', r'^/api/projects/([0-9]+)/files$', list_files_handler),
    ('POST', r'^/api/projects/([0-9]+)/files$', create_file_handler),
    ('GET', r'^/api/files/([0-9]+)$', get_file_handler),
    ('PUT', r'^/api/files/([0-9]+)$', update_file_handler),
    ('GET', r'^/api/me$', get_me_handler),
    ('PUT', r'^/api/theme$', update_theme_handler),
]

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

def main():
    configure_logging()
    port = get_settings().port
    with make_server("", port, create_app()) as httpd:
        logger.info("Serving codepad workspace backend on port %s...", port)
        httpd.serve_forever()

if __name__ == "__main__":
    main()
