"""HTTP routers for BrushQuest"""

from .auth import router as auth_router
from .worlds import router as worlds_router
from .stories import router as stories_router
from .pets import router as pets_router
from .characters import router as characters_router
from .collectibles import router as collectibles_router
from .children import router as children_router
from .content import router as content_router
from .media import router as media_router
from .audio import router as audio_router
from .jobs import router as jobs_router

routers = [
    auth_router,
    worlds_router,
    stories_router,
    pets_router,
    characters_router,
    collectibles_router,
    children_router,
    content_router,
    media_router,
    audio_router,
    jobs_router,
]
