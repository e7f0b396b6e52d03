"""
Reference classes API for the Tutordesk dashboard using FastAPI.

Serves the delete endpoint the countdown commits to, plus the list and
create routes that dashboard views re-fetch after a refresh signal.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core.entities import ScheduledClass
from ..core.enums import DeleteScope
from ..core.exceptions import ValidationError
from ..persistence import ClassRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


# Pydantic models for API
class ClassCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    teacher_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    scheduled_at: Optional[datetime] = None
    duration_minutes: int = Field(default=60, ge=1, le=600)
    series_id: Optional[str] = None


class ClassResponse(BaseModel):
    id: str
    subject: str
    teacher_id: str
    student_id: str
    scheduled_at: datetime
    duration_minutes: int
    series_id: Optional[str] = None
    created_at: datetime


class DeleteResponse(BaseModel):
    message: str
    count: int
    deleted_ids: List[str] = []


class ClassesRestAPI:
    """REST API serving scheduled classes."""

    def __init__(self, repository: Optional[ClassRepository] = None):
        self._repository = repository or ClassRepository()

        # Create FastAPI app
        self.app = FastAPI(
            title="Tutordesk Classes API",
            description="Scheduled classes of the tutoring dashboard",
            version="1.0.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )

        # Add CORS middleware
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Setup routes
        self._setup_routes()

    @property
    def repository(self) -> ClassRepository:
        return self._repository

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        @self.app.post("/classes", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
        async def create_class(class_data: ClassCreate):
            """Schedule a class."""
            try:
                scheduled_class = ScheduledClass(
                    subject=class_data.subject,
                    teacher_id=class_data.teacher_id,
                    student_id=class_data.student_id,
                    scheduled_at=class_data.scheduled_at,
                    duration_minutes=class_data.duration_minutes,
                    series_id=class_data.series_id,
                )
                self._repository.save(scheduled_class)
                return self._class_to_response(scheduled_class)
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/classes", response_model=List[ClassResponse])
        async def list_classes(series_id: Optional[str] = None):
            """List scheduled classes, optionally for one series."""
            return [self._class_to_response(c) for c in self._repository.find_all(series_id)]

        @self.app.get("/classes/{class_id}", response_model=ClassResponse)
        async def get_class(class_id: str):
            """Get a class by id."""
            scheduled_class = self._repository.find_by_id(class_id)
            if not scheduled_class:
                raise HTTPException(status_code=404, detail="Class not found")
            return self._class_to_response(scheduled_class)

        @self.app.delete("/classes/{class_id}", response_model=DeleteResponse)
        async def delete_class(class_id: str,
                               scope: Optional[str] = None,
                               delete_type: Optional[str] = Query(default=None, alias="deleteType")):
            """Delete one class or its whole series."""
            raw_scope = scope or delete_type or DeleteScope.SINGLE.value
            try:
                delete_scope = DeleteScope.parse(raw_scope)
            except ValueError:
                return JSONResponse(
                    status_code=400, content={"message": "Invalid scope. Use single | series"}
                )

            scheduled_class = self._repository.find_by_id(class_id)
            if not scheduled_class:
                return JSONResponse(status_code=404, content={"message": "Class not found"})

            if delete_scope is DeleteScope.SERIES and scheduled_class.series_id:
                ids = self._repository.delete_series(scheduled_class.series_id)
                logger.info("Deleted series %s (%d classes)", scheduled_class.series_id, len(ids))
                return DeleteResponse(
                    message=f"Deleted series ({len(ids)} classes)", count=len(ids), deleted_ids=ids
                )

            self._repository.delete(class_id)
            logger.info("Deleted class %s", class_id)
            return DeleteResponse(
                message="Class deleted (single instance)", count=1, deleted_ids=[class_id]
            )

    def _class_to_response(self, scheduled_class: ScheduledClass) -> ClassResponse:
        """Convert ScheduledClass entity to response model."""
        data: Dict[str, Any] = scheduled_class.to_dict()
        return ClassResponse(**data)
