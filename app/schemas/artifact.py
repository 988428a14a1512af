from pydantic import BaseModel
from typing import Dict, List, Optional

class CodeFile(BaseModel):
    path: str
    content: str
    language: str

class GeneratedCode(BaseModel):
    files: List[CodeFile] = []
    dependencies: Optional[Dict[str, str]] = None
    framework: Optional[str] = None
