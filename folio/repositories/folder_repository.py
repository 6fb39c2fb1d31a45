"""Repository for folder rows."""

from ..exceptions import FolderNotFoundError
from ..models.folder import Folder
from .base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    model_class = Folder
    not_found_error = FolderNotFoundError

    def create(self, folder_id: str, name: str) -> Folder:
        return self.add(Folder(id=folder_id, name=name))

    def exists(self, folder_id: str) -> bool:
        return self.get_by_id_optional(folder_id) is not None
