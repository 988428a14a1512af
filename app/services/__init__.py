from .ai_service import CodeGenerationService
from .vercel_service import VercelService
from .supabase_service import BrowserGateway, ServiceGateway
from .lifecycle_service import ProjectLifecycleService

__all__ = [
    "CodeGenerationService",
    "VercelService",
    "BrowserGateway",
    "ServiceGateway",
    "ProjectLifecycleService"
]
