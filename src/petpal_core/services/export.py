"""
Pet export assembly and rendering.

``assemble_export`` walks one pet's record graph into an ``ExportDocument``;
it performs no writes. Formatters turn a document into bytes and are looked
up by format name in an ``ExportFormatterRegistry``. Only CSV ships with the
package; other formats (PDF) are plugged in by registering a formatter.
"""

import csv
import io
import logging
from datetime import date, datetime
from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
)

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..authorization import Action, Principal, ResourceKind
from ..exceptions import InvalidInputException
from ..models import (
    Appointment,
    FeedingSchedule,
    HealthRecord,
    Medication,
    Weight,
)
from ..schemas import (
    AppointmentExport,
    ExportDocument,
    ExportRequest,
    ExportResult,
    ExportSection,
    FeedingScheduleExport,
    HealthRecordExport,
    MedicationExport,
    OwnerExport,
    PetInfoExport,
    WeightExport,
    display_name,
    parse_payload,
)
from ..utils.datetime_utils import ensure_utc, format_time_of_day, get_current_utc
from .base import authorize_pet, load_pet

logger = logging.getLogger(__name__)

SECTION_ORDER = (
    ExportSection.BASIC_INFO,
    ExportSection.HEALTH_RECORDS,
    ExportSection.MEDICATIONS,
    ExportSection.APPOINTMENTS,
    ExportSection.WEIGHT_RECORDS,
    ExportSection.FEEDING_SCHEDULES,
)


def _parse_section(value: Union[str, ExportSection]) -> ExportSection:
    if isinstance(value, ExportSection):
        return value
    normalized = str(value).strip().replace("_", "").replace(" ", "").lower()
    for section in ExportSection:
        if section.value.lower() == normalized:
            return section
    raise InvalidInputException(
        f"Unknown export section: {value}", field="sections", value=value
    )


def resolve_sections(
    sections: Optional[Iterable[Union[str, ExportSection]]],
) -> List[ExportSection]:
    """
    Expand a section request into concrete sections in document order.

    An empty request and the ``All`` sentinel both select every section.

    Raises:
        InvalidInputException: If a section name is not recognised
    """
    requested = [_parse_section(value) for value in (sections or ())]
    if not requested or ExportSection.ALL in requested:
        return list(SECTION_ORDER)
    return [section for section in SECTION_ORDER if section in requested]


def _within(column, start_date: Optional[date], end_date: Optional[date]) -> list:
    conditions = []
    if start_date is not None:
        conditions.append(column >= start_date)
    if end_date is not None:
        conditions.append(column <= end_date)
    return conditions


async def assemble_export(
    session: AsyncSession,
    pet_id: int,
    sections: Optional[Iterable[Union[str, ExportSection]]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> ExportDocument:
    """
    Build the export document for one pet.

    Date bounds filter each section on its own date column and are
    inclusive; feeding schedules are never date filtered. Dated sections are
    ordered newest first.

    Raises:
        ResourceNotFoundException: If the pet does not exist
        InvalidInputException: If a section name is not recognised
    """
    selected = resolve_sections(sections)
    pet = await load_pet(session, pet_id)

    document = ExportDocument(
        pet_id=pet.id,
        pet_name=pet.name,
        export_date=ensure_utc(now or get_current_utc()),
        sections=selected,
        start_date=start_date,
        end_date=end_date,
    )

    if ExportSection.BASIC_INFO in selected:
        owners = sorted(
            pet.owners, key=lambda link: (not link.is_primary_owner, link.id)
        )
        document.basic_info = PetInfoExport(
            name=pet.name,
            species=pet.species,
            breed=pet.breed,
            date_of_birth=pet.date_of_birth,
            weight=pet.weight,
            color=pet.color,
            microchip_number=pet.microchip_number,
            owners=[
                OwnerExport(
                    name=display_name(link.user_profile) or "",
                    email=link.user_profile.email,
                    phone=link.user_profile.phone,
                    is_primary_owner=link.is_primary_owner,
                )
                for link in owners
            ],
        )

    if ExportSection.HEALTH_RECORDS in selected:
        result = await session.execute(
            select(HealthRecord)
            .options(selectinload(HealthRecord.veterinarian))
            .where(
                HealthRecord.pet_id == pet.id,
                *_within(HealthRecord.record_date, start_date, end_date),
            )
            .order_by(HealthRecord.record_date.desc(), HealthRecord.id.desc())
        )
        document.health_records = [
            HealthRecordExport(
                record_type=record.record_type,
                description=record.description,
                record_date=record.record_date,
                due_date=record.due_date,
                veterinarian_name=display_name(record.veterinarian),
                notes=record.notes,
            )
            for record in result.scalars().all()
        ]

    if ExportSection.MEDICATIONS in selected:
        result = await session.execute(
            select(Medication)
            .where(
                Medication.pet_id == pet.id,
                *_within(Medication.start_date, start_date, end_date),
            )
            .order_by(Medication.start_date.desc(), Medication.id.desc())
        )
        document.medications = [
            MedicationExport.model_validate(medication, from_attributes=True)
            for medication in result.scalars().all()
        ]

    if ExportSection.APPOINTMENTS in selected:
        result = await session.execute(
            select(Appointment)
            .options(selectinload(Appointment.veterinarian))
            .where(
                Appointment.pet_id == pet.id,
                *_within(Appointment.appointment_date, start_date, end_date),
            )
            .order_by(
                Appointment.appointment_date.desc(),
                Appointment.appointment_time.desc(),
                Appointment.id.desc(),
            )
        )
        document.appointments = [
            AppointmentExport(
                appointment_date=appointment.appointment_date,
                appointment_time=appointment.appointment_time,
                appointment_type=appointment.appointment_type,
                veterinarian_name=display_name(appointment.veterinarian),
                notes=appointment.notes,
                status=appointment.status,
            )
            for appointment in result.scalars().all()
        ]

    if ExportSection.WEIGHT_RECORDS in selected:
        result = await session.execute(
            select(Weight)
            .where(Weight.pet_id == pet.id, *_within(Weight.date, start_date, end_date))
            .order_by(Weight.date.desc(), Weight.id.desc())
        )
        document.weight_records = [
            WeightExport.model_validate(weight, from_attributes=True)
            for weight in result.scalars().all()
        ]

    if ExportSection.FEEDING_SCHEDULES in selected:
        result = await session.execute(
            select(FeedingSchedule)
            .where(FeedingSchedule.pet_id == pet.id)
            .order_by(FeedingSchedule.feeding_time, FeedingSchedule.id)
        )
        document.feeding_schedules = [
            FeedingScheduleExport.model_validate(schedule, from_attributes=True)
            for schedule in result.scalars().all()
        ]

    logger.debug(
        f"Assembled export for pet {pet.id} with sections "
        f"{[section.value for section in selected]}"
    )
    return document


class ExportFormatter(Protocol):
    """Renders an assembled export document."""

    content_type: str
    extension: str

    def render(self, document: ExportDocument) -> bytes:
        ...


def _fmt(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


class CsvExportFormatter:
    """Sectioned CSV: a title row and a header row per section, blank line between."""

    content_type = "text/csv"
    extension = "csv"

    def render(self, document: ExportDocument) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        if document.basic_info is not None:
            info = document.basic_info
            self._section(
                writer,
                "PET INFORMATION",
                [
                    "Name",
                    "Species",
                    "Breed",
                    "Date of Birth",
                    "Weight",
                    "Color",
                    "Microchip Number",
                ],
                [
                    [
                        info.name,
                        info.species,
                        info.breed,
                        info.date_of_birth,
                        info.weight,
                        info.color,
                        info.microchip_number,
                    ]
                ],
            )
            if info.owners:
                self._section(
                    writer,
                    "OWNERS",
                    ["Name", "Email", "Phone", "Primary Owner"],
                    [
                        [o.name, o.email, o.phone, o.is_primary_owner]
                        for o in info.owners
                    ],
                )

        if document.health_records is not None:
            self._section(
                writer,
                "HEALTH RECORDS",
                [
                    "Record Type",
                    "Description",
                    "Record Date",
                    "Due Date",
                    "Veterinarian",
                    "Notes",
                ],
                [
                    [
                        r.record_type,
                        r.description,
                        r.record_date,
                        r.due_date,
                        r.veterinarian_name,
                        r.notes,
                    ]
                    for r in document.health_records
                ],
            )

        if document.medications is not None:
            self._section(
                writer,
                "MEDICATIONS",
                [
                    "Name",
                    "Dosage",
                    "Frequency",
                    "Start Date",
                    "End Date",
                    "Instructions",
                    "Prescriber",
                    "Active",
                ],
                [
                    [
                        m.name,
                        m.dosage,
                        m.frequency,
                        m.start_date,
                        m.end_date,
                        m.instructions,
                        m.prescriber,
                        m.is_active,
                    ]
                    for m in document.medications
                ],
            )

        if document.appointments is not None:
            self._section(
                writer,
                "APPOINTMENTS",
                ["Date", "Time", "Type", "Veterinarian", "Notes", "Status"],
                [
                    [
                        a.appointment_date,
                        format_time_of_day(a.appointment_time),
                        a.appointment_type,
                        a.veterinarian_name,
                        a.notes,
                        a.status,
                    ]
                    for a in document.appointments
                ],
            )

        if document.weight_records is not None:
            self._section(
                writer,
                "WEIGHT RECORDS",
                ["Weight", "Unit", "Date", "Notes"],
                [
                    [w.weight_value, w.weight_unit, w.date, w.notes]
                    for w in document.weight_records
                ],
            )

        if document.feeding_schedules is not None:
            self._section(
                writer,
                "FEEDING SCHEDULES",
                ["Feeding Time", "Food Type", "Portion", "Notes", "Active"],
                [
                    [
                        format_time_of_day(f.feeding_time),
                        f.food_type,
                        f.portion,
                        f.notes,
                        f.is_active,
                    ]
                    for f in document.feeding_schedules
                ],
            )

        return buffer.getvalue().encode("utf-8")

    @staticmethod
    def _section(
        writer: Any,
        title: str,
        header: Sequence[str],
        rows: Iterable[Sequence[Any]],
    ) -> None:
        writer.writerow([title])
        writer.writerow(header)
        for row in rows:
            writer.writerow([_fmt(value) for value in row])
        writer.writerow([])


class ExportFormatterRegistry:
    """Case-insensitive map from format name to formatter."""

    def __init__(self, formatters: Optional[Mapping[str, ExportFormatter]] = None):
        self._formatters: Dict[str, ExportFormatter] = {}
        for name, formatter in (formatters or {}).items():
            self.register(name, formatter)

    def register(self, name: str, formatter: ExportFormatter) -> None:
        self._formatters[name.strip().upper()] = formatter

    def get(self, name: str) -> ExportFormatter:
        """
        Raises:
            InvalidInputException: If no formatter is registered for ``name``
        """
        formatter = self._formatters.get((name or "").strip().upper())
        if formatter is None:
            raise InvalidInputException(
                f"Unsupported export format: {name}", field="format", value=name
            )
        return formatter

    @property
    def formats(self) -> List[str]:
        return sorted(self._formatters)


def default_registry() -> ExportFormatterRegistry:
    return ExportFormatterRegistry({"CSV": CsvExportFormatter()})


def export_file_name(pet_id: int, exported_at: datetime, extension: str) -> str:
    return f"pet_{pet_id}_{exported_at:%Y%m%d%H%M%S}.{extension}"


async def export_pet(
    session: AsyncSession,
    principal: Optional[Principal],
    pet_id: int,
    data: Union[ExportRequest, Mapping[str, Any]],
    registry: Optional[ExportFormatterRegistry] = None,
    now: Optional[datetime] = None,
) -> ExportResult:
    """
    Authorize, assemble and render an export of one pet.

    Raises:
        InvalidInputException: For unknown formats or section names
        ForbiddenException: If the caller may not read the pet
    """
    request = parse_payload(ExportRequest, data)
    await authorize_pet(session, principal, pet_id, Action.READ, ResourceKind.PET)

    formatter = (registry or default_registry()).get(request.format)
    document = await assemble_export(
        session,
        pet_id,
        request.sections,
        request.start_date,
        request.end_date,
        now=now,
    )
    content = formatter.render(document)

    logger.info(
        f"Exported pet {pet_id} as {request.format.upper()} "
        f"for {principal.identity_id}"
    )
    return ExportResult(
        file_name=export_file_name(pet_id, document.export_date, formatter.extension),
        content_type=formatter.content_type,
        content=content,
    )
