from .auth import router as auth_router
from .course import router as course_router
from .progress import router as progress_router
from .quiz import router as quiz_router
from .user import router as user_router

# auth_router owns /api/users/profile and must precede /api/users/{user_id}
routes = [
    auth_router,
    user_router,
    course_router,
    quiz_router,
    progress_router,
]
