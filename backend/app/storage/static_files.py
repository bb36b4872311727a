import os
from starlette.staticfiles import StaticFiles

STL_MEDIA_TYPE = "model/stl"


class MediaStaticFiles(StaticFiles):
    """Static file app for uploaded media.

    STL models are served with an explicit 3D model content type and an
    inline disposition so browsers hand them to the viewer instead of
    downloading them.
    """

    def file_response(self, full_path, stat_result, scope, status_code=200):
        response = super().file_response(full_path, stat_result, scope, status_code)
        if os.fspath(full_path).lower().endswith(".stl"):
            response.headers["content-type"] = STL_MEDIA_TYPE
            response.headers["content-disposition"] = "inline"
        return response
