import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from billboard_booking import config, selection
from billboard_booking.availability import AvailabilityResolver
from billboard_booking.errors import InvalidTransition, SystemUnavailableError, ValidationError
from billboard_booking.models import CampaignSummary, CampaignType, Customer, Resource, SelectionState, Stage
from billboard_booking.store import BookingStore
from billboard_booking.submitter import BookingSubmitter, SubmissionResult
from billboard_booking.summary import summarize
from billboard_booking.template import apply_template, template_from

logger = logging.getLogger(__name__)


class BookingSession:
    """One booking dialog for one resource, from campaign type to confirmation.

    Wires the resolver, the selection state machine, the template propagator
    and the submitter together. Every change to the selection produces a new
    state, and previous states are kept so they can be undone.
    """

    def __init__(
        self,
        resource: Resource,
        store: BookingStore,
        resolver: Optional[AvailabilityResolver] = None,
        submitter: Optional[BookingSubmitter] = None,
        today: Optional[date] = None,
    ):
        self.resource = resource
        self.store = store
        self.resolver = resolver or AvailabilityResolver(store)
        self.submitter = submitter or BookingSubmitter(store)
        self.today = today
        self.state: SelectionState = selection.reset()
        self.system_available: Optional[bool] = None
        self.last_result: Optional[SubmissionResult] = None
        self._undo: List[SelectionState] = []
        self._redo: List[SelectionState] = []

    # --- Lifecycle ---

    def open(self):
        """Probes the store. Raises SystemUnavailableError when it is not usable."""
        result = self.store.check_availability_system()
        self.system_available = result.success
        if not result.success:
            logger.warning(f"Booking system check failed: {result.error}")
            raise SystemUnavailableError(result.error or "The booking system is currently not available.")

    def close(self):
        """Full reset, as when the host dialog is dismissed."""
        self.state = selection.reset()
        self.last_result = None
        self._undo.clear()
        self._redo.clear()

    # --- History ---

    def _commit(self, new_state: SelectionState):
        if new_state is self.state:
            return
        self._undo.append(self.state)
        self._redo.clear()
        self.state = new_state

    def undo(self) -> bool:
        if not self._undo or self.state.stage == Stage.CONFIRMATION:
            return False
        self._redo.append(self.state)
        self.state = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo or self.state.stage == Stage.CONFIRMATION:
            return False
        self._undo.append(self.state)
        self.state = self._redo.pop()
        return True

    # --- Calendar ---

    def choose_campaign_type(self, campaign_type: CampaignType):
        if self.system_available is None:
            self.open()
        elif not self.system_available:
            raise SystemUnavailableError("The booking system is currently not available.")

        self.state = selection.choose_campaign_type(self.state, campaign_type)
        self.last_result = None
        self._undo.clear()
        self._redo.clear()
        logger.info(f"Campaign type set to {self.state.campaign_type.value} for {self.resource.id}")

    def _validate_date(self, date_str: str):
        try:
            picked = datetime.strptime(date_str, "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError("Date must be in YYYY-MM-DD format.", field="date")

        today = self.today or date.today()
        last = today + timedelta(days=config.BOOKING_HORIZON_DAYS)
        if picked < today or picked > last:
            raise ValidationError(f"Date must be between {today.isoformat()} and {last.isoformat()}.", field="date")

    def select_date(self, date_str: str):
        """Picks a date and resolves its availability when it was added."""
        self._validate_date(date_str)
        new_state = selection.select_date(self.state, date_str)

        entry = new_state.selections.get(date_str)
        if entry is not None and not entry.is_resolved:
            slots, confirmed = self.resolver.resolve_day(self.resource.id, date_str)
            new_state = selection.set_availability(new_state, date_str, slots, confirmed)

        self._commit(new_state)

    def refresh_availability(self, date_str: str):
        """Re-resolves a selected date, dropping hours that became booked."""
        if date_str not in self.state.selections:
            raise ValidationError(f"Date {date_str} is not selected.", field="date")
        slots, confirmed = self.resolver.resolve_day(self.resource.id, date_str)
        self._commit(selection.set_availability(self.state, date_str, slots, confirmed))

    def toggle_hour(self, date_str: str, hour: int):
        self._commit(selection.toggle_hour(self.state, date_str, hour))

    def select_hours(self, date_str: str, hours: Iterable[int]):
        self._commit(selection.set_hours(self.state, date_str, hours))

    def clear(self, date_str: Optional[str] = None):
        self._commit(selection.clear_hours(self.state, date_str))

    def apply_template(self, source_date: str, target_dates: Optional[Iterable[str]] = None):
        """Copies ``source_date``'s hours onto the targets (default: every other selected date)."""
        if self.state.stage != Stage.CALENDAR:
            raise InvalidTransition(f"Cannot apply a template in stage '{self.state.stage.value}'.")
        if source_date not in self.state.selections:
            raise ValidationError(f"Date {source_date} is not selected.", field="date")

        if target_dates is None:
            target_dates = [d for d in self.state.selections if d != source_date]
        source_hours = template_from(self.state.selections, source_date)
        selections = apply_template(self.state.selections, source_hours, target_dates)
        self._commit(self.state.model_copy(update={"selections": selections, "error": None}))

    # --- Details / submission ---

    def proceed_to_details(self):
        self._commit(selection.proceed_to_details(self.state))

    def back_to_calendar(self):
        self._commit(selection.back_to_calendar(self.state))

    def submit(self, customer: Customer) -> SubmissionResult:
        """Creates the bookings. Moves to confirmation only if every create succeeded.

        A ValidationError is recorded on the state and re-raised. A failed
        create is recorded on the state and returned in the result; bookings
        created before it are not rolled back.
        """
        if self.state.stage != Stage.DETAILS:
            raise InvalidTransition(f"Cannot submit in stage '{self.state.stage.value}'.")

        try:
            result = self.submitter.submit(self.resource, self.state.selections, customer)
        except ValidationError as e:
            self.state = selection.with_error(self.state, e.message)
            raise

        self.last_result = result
        if result.success:
            self.state = selection.confirm(self.state)
        else:
            self.state = selection.with_error(self.state, str(result.error))
        return result

    def summary(self) -> CampaignSummary:
        return summarize(self.resource, self.state.selections)
