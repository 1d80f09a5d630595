from __future__ import annotations

from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import Field as PydanticField
from sqlalchemy import JSON, Column, Index, String, text
from sqlmodel import Field, SQLModel

from pestops.domain.state_machine import ReportStatus

DECLINE_NOTES_MIN_LENGTH = 10


def now_utc() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid4())


class UserRole(StrEnum):
    ADMIN = "admin"
    PCO = "pco"
    BOTH = "both"


class ReportType(StrEnum):
    BAIT_INSPECTION = "bait_inspection"
    FUMIGATION = "fumigation"
    BOTH = "both"

    @property
    def includes_bait(self) -> bool:
        return self in {ReportType.BAIT_INSPECTION, ReportType.BOTH}

    @property
    def includes_fumigation(self) -> bool:
        return self in {ReportType.FUMIGATION, ReportType.BOTH}


class AssignmentStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class StationLocation(StrEnum):
    INSIDE = "inside"
    OUTSIDE = "outside"


class BaitStatus(StrEnum):
    CLEAN = "clean"
    EATEN = "eaten"
    WET = "wet"
    OLD = "old"


class StationCondition(StrEnum):
    GOOD = "good"
    NEEDS_REPAIR = "needs_repair"
    DAMAGED = "damaged"
    MISSING = "missing"


class StationAction(StrEnum):
    REPAIRED = "repaired"
    REPLACED = "replaced"
    NONE = "none"


class WarningSignCondition(StrEnum):
    GOOD = "good"
    REPLACED = "replaced"
    REPAIRED = "repaired"
    REMOUNTED = "remounted"


class MonitorType(StrEnum):
    LIGHT = "light"
    BOX = "box"


class MonitorCondition(StrEnum):
    GOOD = "good"
    REPLACED = "replaced"
    REPAIRED = "repaired"
    OTHER = "other"


class LightCondition(StrEnum):
    GOOD = "good"
    FAULTY = "faulty"
    NA = "na"


class LightFaultyType(StrEnum):
    STARTER = "starter"
    TUBE = "tube"
    CABLE = "cable"
    ELECTRICITY = "electricity"
    OTHER = "other"
    NA = "na"


class NotificationType(StrEnum):
    REPORT_SUBMITTED = "report_submitted"
    REPORT_APPROVED = "report_approved"
    REPORT_DECLINED = "report_declined"
    REPORT_ARCHIVED = "report_archived"


# Tables


class EventRecord(SQLModel, table=True):
    __tablename__ = "events"

    event_id: str = Field(default_factory=new_id, primary_key=True)
    event_type: str = Field(index=True)
    ts: datetime = Field(default_factory=now_utc, index=True)
    actor_id: str | None = Field(default=None, index=True)
    payload: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    username: str = Field(index=True, unique=True)
    name: str
    password_hash: str
    role: UserRole = Field(sa_type=String, index=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=now_utc, index=True)


class Client(SQLModel, table=True):
    __tablename__ = "clients"

    id: str = Field(default_factory=new_id, primary_key=True)
    company_name: str = Field(index=True)
    city: str | None = None
    total_bait_stations_inside: int = Field(default=0)
    total_bait_stations_outside: int = Field(default=0)
    total_insect_monitors_light: int = Field(default=0)
    total_insect_monitors_box: int = Field(default=0)
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class ClientPcoAssignment(SQLModel, table=True):
    __tablename__ = "client_pco_assignments"
    __table_args__ = (
        Index(
            "uq_client_pco_assignments_active_client",
            "client_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
        Index("ix_client_pco_assignments_client_pco", "client_id", "pco_id"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    client_id: str = Field(foreign_key="clients.id", index=True)
    pco_id: str = Field(foreign_key="users.id", index=True)
    assigned_by: str | None = None
    assigned_at: datetime = Field(default_factory=now_utc)
    unassigned_at: datetime | None = None
    unassigned_by: str | None = None
    status: AssignmentStatus = Field(default=AssignmentStatus.ACTIVE, sa_type=String, index=True)


class Report(SQLModel, table=True):
    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_client_pco_status", "client_id", "pco_id", "status"),
        Index("ix_reports_client_service_date", "client_id", "service_date"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    client_id: str = Field(foreign_key="clients.id", index=True)
    pco_id: str = Field(foreign_key="users.id", index=True)
    report_type: ReportType = Field(sa_type=String)
    service_date: date = Field(index=True)
    next_service_date: date | None = None
    status: ReportStatus = Field(default=ReportStatus.DRAFT, sa_type=String, index=True)
    pco_signature: str | None = None
    client_signature: str | None = None
    client_signature_name: str | None = None
    general_remarks: str | None = None
    admin_notes: str | None = None
    recommendations: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    submitted_at: datetime | None = None
    new_bait_stations_count: int = Field(default=0)
    new_insect_monitors_count: int = Field(default=0)
    expected_bait_stations_inside: int | None = None
    expected_bait_stations_outside: int | None = None
    expected_insect_monitors_light: int | None = None
    expected_insect_monitors_box: int | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)
    updated_at: datetime = Field(default_factory=now_utc, index=True)


class BaitStation(SQLModel, table=True):
    __tablename__ = "bait_stations"
    __table_args__ = (Index("ix_bait_stations_report_location", "report_id", "location"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    report_id: str = Field(foreign_key="reports.id", index=True)
    sort_order: int = Field(default=0)
    station_number: str
    location: StationLocation = Field(sa_type=String)
    is_accessible: bool = Field(default=True)
    inaccessible_reason: str | None = None
    activity_detected: bool = Field(default=False)
    activity_droppings: bool = Field(default=False)
    activity_gnawing: bool = Field(default=False)
    activity_tracks: bool = Field(default=False)
    activity_other: bool = Field(default=False)
    activity_other_description: str | None = None
    bait_status: BaitStatus = Field(sa_type=String)
    station_condition: StationCondition = Field(sa_type=String)
    action_taken: StationAction = Field(default=StationAction.NONE, sa_type=String)
    warning_sign_condition: WarningSignCondition = Field(sa_type=String)
    rodent_box_replaced: bool = Field(default=False)
    station_remarks: str | None = None
    is_new_addition: bool = Field(default=False)
    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)


class StationChemical(SQLModel, table=True):
    __tablename__ = "station_chemicals"

    id: str = Field(default_factory=new_id, primary_key=True)
    station_id: str = Field(foreign_key="bait_stations.id", index=True)
    chemical_id: str = Field(index=True)
    quantity: float
    batch_number: str | None = None


class FumigationArea(SQLModel, table=True):
    __tablename__ = "fumigation_areas"

    id: str = Field(default_factory=new_id, primary_key=True)
    report_id: str = Field(foreign_key="reports.id", index=True)
    area_name: str
    is_other: bool = Field(default=False)
    other_description: str | None = None


class FumigationTargetPest(SQLModel, table=True):
    __tablename__ = "fumigation_target_pests"

    id: str = Field(default_factory=new_id, primary_key=True)
    report_id: str = Field(foreign_key="reports.id", index=True)
    pest_name: str
    is_other: bool = Field(default=False)
    other_description: str | None = None


class FumigationChemical(SQLModel, table=True):
    __tablename__ = "fumigation_chemicals"

    id: str = Field(default_factory=new_id, primary_key=True)
    report_id: str = Field(foreign_key="reports.id", index=True)
    chemical_id: str = Field(index=True)
    quantity: float
    batch_number: str | None = None


class InsectMonitor(SQLModel, table=True):
    __tablename__ = "insect_monitors"
    __table_args__ = (Index("ix_insect_monitors_report_type", "report_id", "monitor_type"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    report_id: str = Field(foreign_key="reports.id", index=True)
    sort_order: int = Field(default=0)
    monitor_number: str | None = None
    location: str | None = None
    monitor_type: MonitorType = Field(sa_type=String)
    monitor_condition: MonitorCondition = Field(default=MonitorCondition.GOOD, sa_type=String)
    monitor_condition_other: str | None = None
    warning_sign_condition: WarningSignCondition = Field(default=WarningSignCondition.GOOD, sa_type=String)
    light_condition: LightCondition = Field(default=LightCondition.NA, sa_type=String)
    light_faulty_type: LightFaultyType = Field(default=LightFaultyType.NA, sa_type=String)
    light_faulty_other: str | None = None
    glue_board_replaced: bool = Field(default=False)
    tubes_replaced: bool | None = None
    monitor_serviced: bool = Field(default=False)
    is_new_addition: bool = Field(default=False)
    created_at: datetime = Field(default_factory=now_utc)


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    type: NotificationType = Field(sa_type=String, index=True)
    title: str
    message: str
    read_at: datetime | None = None
    created_at: datetime = Field(default_factory=now_utc, index=True)


# Request / response schemas


class EventEnvelope(BaseModel):
    event_id: str = PydanticField(default_factory=new_id)
    event_type: str
    ts: datetime = PydanticField(default_factory=now_utc)
    actor_id: str | None = None
    payload: dict[str, Any]


class ORMReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class BootstrapAdminRequest(BaseModel):
    username: str
    name: str
    password: str


class UserCreate(BaseModel):
    username: str
    name: str
    password: str
    role: UserRole = UserRole.PCO


class UserRead(ORMReadModel):
    id: str
    username: str
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime


class DevLoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    permissions: list[str]


class EquipmentBaseline(BaseModel):
    total_bait_stations_inside: int | None = PydanticField(default=None, ge=0)
    total_bait_stations_outside: int | None = PydanticField(default=None, ge=0)
    total_insect_monitors_light: int | None = PydanticField(default=None, ge=0)
    total_insect_monitors_box: int | None = PydanticField(default=None, ge=0)


class ClientCreate(BaseModel):
    company_name: str = PydanticField(min_length=1, max_length=200)
    city: str | None = None
    total_bait_stations_inside: int = PydanticField(default=0, ge=0)
    total_bait_stations_outside: int = PydanticField(default=0, ge=0)
    total_insect_monitors_light: int = PydanticField(default=0, ge=0)
    total_insect_monitors_box: int = PydanticField(default=0, ge=0)


class ClientRead(ORMReadModel):
    id: str
    company_name: str
    city: str | None
    total_bait_stations_inside: int
    total_bait_stations_outside: int
    total_insect_monitors_light: int
    total_insect_monitors_box: int
    created_at: datetime
    updated_at: datetime


class AssignmentCreate(BaseModel):
    pco_id: str


class AssignmentRead(ORMReadModel):
    id: str
    client_id: str
    pco_id: str
    assigned_by: str | None
    assigned_at: datetime
    unassigned_at: datetime | None
    unassigned_by: str | None
    status: AssignmentStatus


class StationChemicalIn(BaseModel):
    chemical_id: str
    quantity: float = PydanticField(gt=0)
    batch_number: str | None = PydanticField(default=None, max_length=50)


class StationChemicalRead(ORMReadModel):
    id: str
    chemical_id: str
    quantity: float
    batch_number: str | None


class BaitStationIn(BaseModel):
    id: str | None = None
    station_number: str = PydanticField(min_length=1, max_length=20)
    location: StationLocation
    is_accessible: bool = True
    inaccessible_reason: str | None = PydanticField(default=None, max_length=255)
    activity_detected: bool = False
    activity_droppings: bool = False
    activity_gnawing: bool = False
    activity_tracks: bool = False
    activity_other: bool = False
    activity_other_description: str | None = PydanticField(default=None, max_length=255)
    bait_status: BaitStatus
    station_condition: StationCondition
    action_taken: StationAction = StationAction.NONE
    warning_sign_condition: WarningSignCondition
    rodent_box_replaced: bool = False
    station_remarks: str | None = PydanticField(default=None, max_length=5000)
    chemicals: list[StationChemicalIn] = PydanticField(default_factory=list)
    is_new_addition: bool | None = None

    @model_validator(mode="after")
    def _check_conditional_fields(self) -> BaitStationIn:
        if not self.is_accessible and not self.inaccessible_reason:
            raise ValueError("inaccessible_reason is required when station is not accessible")
        if self.activity_other and not self.activity_other_description:
            raise ValueError('activity_other_description is required when "other activity" is selected')
        if self.station_condition != StationCondition.GOOD and self.action_taken == StationAction.NONE:
            raise ValueError("action_taken must be repaired or replaced when station is not in good condition")
        return self


class BaitStationUpdate(BaseModel):
    station_number: str | None = PydanticField(default=None, min_length=1, max_length=20)
    location: StationLocation | None = None
    is_accessible: bool | None = None
    inaccessible_reason: str | None = PydanticField(default=None, max_length=255)
    activity_detected: bool | None = None
    activity_droppings: bool | None = None
    activity_gnawing: bool | None = None
    activity_tracks: bool | None = None
    activity_other: bool | None = None
    activity_other_description: str | None = PydanticField(default=None, max_length=255)
    bait_status: BaitStatus | None = None
    station_condition: StationCondition | None = None
    action_taken: StationAction | None = None
    warning_sign_condition: WarningSignCondition | None = None
    rodent_box_replaced: bool | None = None
    station_remarks: str | None = PydanticField(default=None, max_length=5000)
    chemicals: list[StationChemicalIn] | None = None


class BaitStationRead(ORMReadModel):
    id: str
    report_id: str
    station_number: str
    location: StationLocation
    is_accessible: bool
    inaccessible_reason: str | None
    activity_detected: bool
    activity_droppings: bool
    activity_gnawing: bool
    activity_tracks: bool
    activity_other: bool
    activity_other_description: str | None
    bait_status: BaitStatus
    station_condition: StationCondition
    action_taken: StationAction
    warning_sign_condition: WarningSignCondition
    rodent_box_replaced: bool
    station_remarks: str | None
    is_new_addition: bool
    chemicals: list[StationChemicalRead] = PydanticField(default_factory=list)


class FumigationEntryIn(BaseModel):
    is_other: bool = False
    other_description: str | None = PydanticField(default=None, max_length=255)

    @model_validator(mode="after")
    def _check_other(self) -> FumigationEntryIn:
        if self.is_other and not self.other_description:
            raise ValueError('other_description is required when "other" is selected')
        return self


class FumigationAreaIn(FumigationEntryIn):
    area_name: str = PydanticField(min_length=1, max_length=100)


class FumigationTargetPestIn(FumigationEntryIn):
    pest_name: str = PydanticField(min_length=1, max_length=100)


class FumigationChemicalIn(StationChemicalIn):
    pass


class FumigationIn(BaseModel):
    areas: list[FumigationAreaIn] = PydanticField(default_factory=list)
    target_pests: list[FumigationTargetPestIn] = PydanticField(default_factory=list)
    chemicals: list[FumigationChemicalIn] = PydanticField(default_factory=list)


class FumigationReplaceRequest(FumigationIn):
    areas: list[FumigationAreaIn] = PydanticField(min_length=1)
    target_pests: list[FumigationTargetPestIn] = PydanticField(min_length=1)
    chemicals: list[FumigationChemicalIn] = PydanticField(min_length=1)


class FumigationAreaRead(ORMReadModel):
    id: str
    area_name: str
    is_other: bool
    other_description: str | None


class FumigationTargetPestRead(ORMReadModel):
    id: str
    pest_name: str
    is_other: bool
    other_description: str | None


class FumigationChemicalRead(ORMReadModel):
    id: str
    chemical_id: str
    quantity: float
    batch_number: str | None


class FumigationRead(BaseModel):
    areas: list[FumigationAreaRead] = PydanticField(default_factory=list)
    target_pests: list[FumigationTargetPestRead] = PydanticField(default_factory=list)
    chemicals: list[FumigationChemicalRead] = PydanticField(default_factory=list)


class InsectMonitorIn(BaseModel):
    id: str | None = None
    monitor_number: str | None = PydanticField(default=None, max_length=20)
    location: str | None = PydanticField(default=None, max_length=100)
    monitor_type: MonitorType
    monitor_condition: MonitorCondition = MonitorCondition.GOOD
    monitor_condition_other: str | None = PydanticField(default=None, max_length=255)
    warning_sign_condition: WarningSignCondition = WarningSignCondition.GOOD
    light_condition: LightCondition = LightCondition.NA
    light_faulty_type: LightFaultyType = LightFaultyType.NA
    light_faulty_other: str | None = PydanticField(default=None, max_length=255)
    glue_board_replaced: bool = False
    tubes_replaced: bool | None = None
    monitor_serviced: bool = False
    is_new_addition: bool | None = None

    @model_validator(mode="after")
    def _check_conditional_fields(self) -> InsectMonitorIn:
        if self.monitor_condition == MonitorCondition.OTHER and not self.monitor_condition_other:
            raise ValueError("monitor_condition_other is required when monitor condition is other")
        if self.monitor_type == MonitorType.LIGHT:
            if self.light_condition == LightCondition.NA:
                raise ValueError("light_condition must be good or faulty for light monitors")
            if self.tubes_replaced is None:
                raise ValueError("tubes_replaced is required for light monitors")
        if self.light_condition == LightCondition.FAULTY and self.light_faulty_type == LightFaultyType.NA:
            raise ValueError("light_faulty_type is required when light is faulty")
        if self.light_faulty_type == LightFaultyType.OTHER and not self.light_faulty_other:
            raise ValueError("light_faulty_other is required when light faulty type is other")
        return self


class InsectMonitorUpdate(BaseModel):
    monitor_number: str | None = PydanticField(default=None, max_length=20)
    location: str | None = PydanticField(default=None, max_length=100)
    monitor_type: MonitorType | None = None
    monitor_condition: MonitorCondition | None = None
    monitor_condition_other: str | None = PydanticField(default=None, max_length=255)
    warning_sign_condition: WarningSignCondition | None = None
    light_condition: LightCondition | None = None
    light_faulty_type: LightFaultyType | None = None
    light_faulty_other: str | None = PydanticField(default=None, max_length=255)
    glue_board_replaced: bool | None = None
    tubes_replaced: bool | None = None
    monitor_serviced: bool | None = None


class InsectMonitorRead(ORMReadModel):
    id: str
    report_id: str
    monitor_number: str | None
    location: str | None
    monitor_type: MonitorType
    monitor_condition: MonitorCondition
    monitor_condition_other: str | None
    warning_sign_condition: WarningSignCondition
    light_condition: LightCondition
    light_faulty_type: LightFaultyType
    light_faulty_other: str | None
    glue_board_replaced: bool
    tubes_replaced: bool | None
    monitor_serviced: bool
    is_new_addition: bool


class EquipmentExpectations(BaseModel):
    expected_bait_stations_inside: int | None = PydanticField(default=None, ge=0)
    expected_bait_stations_outside: int | None = PydanticField(default=None, ge=0)
    expected_insect_monitors_light: int | None = PydanticField(default=None, ge=0)
    expected_insect_monitors_box: int | None = PydanticField(default=None, ge=0)


class _ServiceDates(BaseModel):
    @field_validator("service_date", check_fields=False)
    @classmethod
    def _service_date_not_in_future(cls, value: date | None) -> date | None:
        if value is not None and value > date.today():
            raise ValueError("service date cannot be in the future")
        return value

    @model_validator(mode="after")
    def _next_service_after_service(self) -> _ServiceDates:
        service_date = getattr(self, "service_date", None)
        next_service_date = getattr(self, "next_service_date", None)
        if service_date is not None and next_service_date is not None and next_service_date <= service_date:
            raise ValueError("next_service_date must be after service_date")
        return self


class _PartialReportEdit(_ServiceDates):
    @model_validator(mode="after")
    def _required_columns_not_cleared(self) -> _PartialReportEdit:
        for name in ("report_type", "service_date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self


class ReportCreate(_ServiceDates):
    client_id: str
    report_type: ReportType
    service_date: date
    next_service_date: date | None = None
    pco_signature: str | None = None
    general_remarks: str | None = PydanticField(default=None, max_length=5000)


class ReportUpdate(_PartialReportEdit):
    report_type: ReportType | None = None
    service_date: date | None = None
    next_service_date: date | None = None
    pco_signature: str | None = None
    client_signature: str | None = None
    client_signature_name: str | None = PydanticField(default=None, max_length=100)
    general_remarks: str | None = PydanticField(default=None, max_length=5000)


class CompleteReportBody(_ServiceDates, EquipmentExpectations):
    report_type: ReportType
    service_date: date
    next_service_date: date | None = None
    pco_signature: str | None = None
    client_signature: str | None = None
    client_signature_name: str | None = PydanticField(default=None, max_length=100)
    general_remarks: str | None = PydanticField(default=None, max_length=5000)
    bait_stations: list[BaitStationIn] = PydanticField(default_factory=list)
    fumigation: FumigationIn | None = None
    insect_monitors: list[InsectMonitorIn] = PydanticField(default_factory=list)


class CompleteReportCreate(CompleteReportBody):
    client_id: str


class CompleteReportResubmit(CompleteReportBody):
    pass


class ReportAdminEdit(_PartialReportEdit):
    report_type: ReportType | None = None
    service_date: date | None = None
    next_service_date: date | None = None
    general_remarks: str | None = PydanticField(default=None, max_length=5000)
    admin_notes: str | None = PydanticField(default=None, max_length=5000)
    recommendations: str | None = PydanticField(default=None, max_length=5000)
    bait_stations: list[BaitStationIn] | None = None
    insect_monitors: list[InsectMonitorIn] | None = None
    fumigation_areas: list[FumigationAreaIn] | None = None
    fumigation_target_pests: list[FumigationTargetPestIn] | None = None
    fumigation_chemicals: list[FumigationChemicalIn] | None = None


class ReportApproveRequest(BaseModel):
    admin_notes: str | None = PydanticField(default=None, max_length=5000)
    recommendations: str | None = PydanticField(default=None, max_length=5000)


class ReportDeclineRequest(BaseModel):
    admin_notes: str = PydanticField(min_length=DECLINE_NOTES_MIN_LENGTH, max_length=5000)

    @field_validator("admin_notes")
    @classmethod
    def _notes_not_blank(cls, value: str) -> str:
        if len(value.strip()) < DECLINE_NOTES_MIN_LENGTH:
            raise ValueError(
                f"admin_notes must be at least {DECLINE_NOTES_MIN_LENGTH} characters "
                "(the technician needs clear feedback for revision)"
            )
        return value


class ReportRead(ORMReadModel):
    id: str
    client_id: str
    pco_id: str
    report_type: ReportType
    service_date: date
    next_service_date: date | None
    status: ReportStatus
    pco_signature: str | None
    client_signature: str | None
    client_signature_name: str | None
    general_remarks: str | None
    admin_notes: str | None
    recommendations: str | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    submitted_at: datetime | None
    new_bait_stations_count: int
    new_insect_monitors_count: int
    created_at: datetime
    updated_at: datetime


class ReportDetailRead(ReportRead):
    bait_stations: list[BaitStationRead] = PydanticField(default_factory=list)
    fumigation: FumigationRead = PydanticField(default_factory=FumigationRead)
    insect_monitors: list[InsectMonitorRead] = PydanticField(default_factory=list)


class EquipmentReconcileRead(BaseModel):
    report_id: str
    new_bait_stations_count: int
    new_insect_monitors_count: int
    bait_stations_skipped: bool
    insect_monitors_skipped: bool


class PreFillRead(BaseModel):
    source_report_id: str
    bait_stations: list[dict[str, Any]]
    fumigation: dict[str, list[dict[str, Any]]]
    insect_monitors: list[dict[str, Any]]


class NotificationRead(ORMReadModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read_at: datetime | None
    created_at: datetime
