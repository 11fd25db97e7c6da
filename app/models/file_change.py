"""
File Change Model
=================
One changed file handed to the bug detector.

Fields:
    file_path       — path of the file under review, as reported on findings
    file_content    — full text of the file after the change
    patch           — unified diff of the change (may contain hunk sentinels)
"""
from pydantic import BaseModel


class FileChange(BaseModel):
    file_path: str
    file_content: str = ""
    patch: str = ""
