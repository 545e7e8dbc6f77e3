# Pydantic schemas
from taskportal.schemas.auth import (
    StudentRegister,
    AdminLogin,
    StudentLogin,
    ChangePassword,
    UserResponse,
    LoginResponse,
)
from taskportal.schemas.task import (
    CreateTask,
    UpdateTaskDetails,
    RescheduleTask,
    ReassignTask,
    SubmitTask,
    ReviewTask,
    TaskResponse,
    TaskNotification,
)
from taskportal.schemas.message import SendMessage, MessageOut, ConversationSummaryResponse
from taskportal.schemas.blog import CreateBlogPost, UpdateBlogPost, CreateComment, BlogPostResponse
from taskportal.schemas.student import UpdateProfile, UpdateAdminProfile, CreateStudent, StudentStatusUpdate
