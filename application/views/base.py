"""
Base class for headless form modals.

A modal collects ``values``, validates them into its pydantic form model,
and submits through a ``Mutation`` so the read models it declares are
invalidated once the server accepts the write.

Outcome of ``submit()``:

- local validation fails: ``field_errors`` set, nothing sent
- HTTP 422: server field errors copied to ``field_errors``, modal stays open
- HTTP 401: the rejected session is cleared, ``redirect_to`` names its
  login route and the modal closes
- other API or network error: ``general_error`` set, destructive toast
- success: success toast, modal closed, values reset
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Type

from pydantic import BaseModel, ValidationError

from application.routes.guard import handle_unauthorized
from application.services.notifier import Notifier
from application.services.query import (
    Mutation,
    QueryClient,
    QueryOptions,
    QuerySubscription,
    make_key,
)
from application.services.query.models import Fetcher
from common.exception.exceptions import (
    ApiError,
    PortalError,
    UnauthorizedError,
    ValidationApiError,
)

logger = logging.getLogger(__name__)


def validation_field_errors(error: ValidationError) -> Dict[str, List[str]]:
    """Convert a pydantic error into ``{field: [messages]}``."""
    errors: Dict[str, List[str]] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "__root__"
        errors.setdefault(field, []).append(item["msg"])
    return errors


class FormModal:
    """Open/close state, values and error reporting for one form.

    Read models a form needs (the address book of a delivery request, the
    profile an edit form starts from) are registered with ``watch`` and are
    only fetched while the modal is open.
    """

    form_class: Type[BaseModel] = BaseModel
    invalidates: Sequence[Any] = ()
    required_messages: Dict[str, str] = {}
    success_title = "Success"
    success_message = "Saved successfully"
    error_title = "Error"
    error_message = "Request failed"

    def __init__(
        self,
        query_client: QueryClient,
        notifier: Optional[Notifier] = None,
        initial: Optional[Dict[str, Any]] = None,
    ):
        self.query_client = query_client
        self.notifier = notifier or Notifier()
        self._initial = dict(initial or {})
        self.values: Dict[str, Any] = dict(self._initial)
        self.field_errors: Dict[str, List[str]] = {}
        self.general_error: Optional[str] = None
        self.is_open = False
        self.redirect_to: Optional[str] = None
        self.mutation = Mutation(query_client, self._submit_checked, invalidates=self.invalidates)
        self._watched: List[QuerySubscription] = []
        self._prefill_sources: List[Tuple[QuerySubscription, Type[BaseModel], Sequence[str]]] = []
        self._touched: Set[str] = set()

    def watch(
        self,
        key: Any,
        fetcher: Fetcher,
        prefill: Optional[Type[BaseModel]] = None,
        fields: Sequence[str] = (),
    ) -> QuerySubscription:
        """Subscribe to a read model that is enabled while the modal is open.

        With ``prefill``, the fetched object fills ``fields`` the user has
        not edited yet.
        """
        subscription = self.query_client.subscribe(
            make_key(key), fetcher, QueryOptions(enabled=self.is_open)
        )
        self._watched.append(subscription)
        if prefill is not None:
            self._prefill_sources.append((subscription, prefill, fields))
            subscription.on_change(lambda _: self._prefill())
        return subscription

    def open(self, values: Optional[Dict[str, Any]] = None) -> None:
        self.is_open = True
        if values is not None:
            self.values = {**self._initial, **values}
        self._touched = set(values or ())
        self.field_errors = {}
        self.general_error = None
        for subscription in self._watched:
            subscription.set_enabled(True)
        self._prefill()

    def close(self) -> None:
        self.is_open = False
        for subscription in self._watched:
            subscription.set_enabled(False)

    def dispose(self) -> None:
        self.close()
        for subscription in self._watched:
            subscription.unsubscribe()
        self._watched = []
        self._prefill_sources = []

    def reset(self) -> None:
        self.values = dict(self._initial)
        self._touched = set()
        self.field_errors = {}
        self.general_error = None

    def set(self, field: str, value: Any) -> None:
        self.values[field] = value
        self._touched.add(field)
        self.field_errors.pop(field, None)

    def error_for(self, field: str) -> Optional[str]:
        messages = self.field_errors.get(field) or []
        return messages[0] if messages else None

    @property
    def is_submitting(self) -> bool:
        return self.mutation.is_pending

    def validate(self) -> Optional[BaseModel]:
        errors = {
            field: [message]
            for field, message in self.required_messages.items()
            if not str(self.values.get(field) or "").strip()
        }
        form = None
        try:
            form = self.form_class.model_validate(self.values)
        except ValidationError as e:
            errors = {**validation_field_errors(e), **errors}
        if form is not None and not errors:
            errors = {field: [message] for field, message in self.check(form).items()}

        if errors:
            self.field_errors = errors
            logger.debug(f"{type(self).__name__} failed local validation: {self.field_errors}")
            return None
        return form

    def check(self, form: BaseModel) -> Dict[str, str]:
        """Cross-field rules run on a form that parsed; ``{field: message}``."""
        return {}

    def _prefill(self) -> None:
        if not self.is_open:
            return
        for subscription, model, fields in self._prefill_sources:
            source = parse_one(subscription.data, model)
            if source is None:
                continue
            for field in fields:
                value = getattr(source, field, None)
                if field not in self._touched and value is not None:
                    self.values[field] = value

    async def submit(self) -> bool:
        self.field_errors = {}
        self.general_error = None
        self.redirect_to = None
        form = self.validate()
        if form is None:
            return False

        try:
            response = await self.mutation.mutate(form)
        except ValidationApiError as e:
            self.field_errors = e.errors
            self.general_error = e.message
            return False
        except UnauthorizedError as e:
            self.general_error = e.message
            self.redirect_to = handle_unauthorized(e, self.notifier)
            self.close()
            return False
        except PortalError as e:
            self.general_error = e.message or self.error_message
            self.notifier.error(e, title=self.error_title, fallback=self.error_message)
            return False

        self.notifier.success(self.success_title, response.get("message") or self.success_message)
        self.close()
        self.reset()
        return True

    def _report_failure(self, error: PortalError, fallback: str) -> None:
        """Present a failed side action (delete, toggle) of this form."""
        if isinstance(error, UnauthorizedError):
            self.redirect_to = handle_unauthorized(error, self.notifier)
        else:
            self.notifier.error(error, fallback=fallback)

    async def _submit_checked(self, form: BaseModel) -> Dict[str, Any]:
        response = await self.send(form)
        if isinstance(response, dict) and response.get("success") is False:
            raise ApiError(response.get("message") or self.error_message)
        return response

    async def send(self, form: BaseModel) -> Dict[str, Any]:
        raise NotImplementedError


def envelope_rows(response: Any) -> List[Any]:
    data = response.get("data") if isinstance(response, dict) else response
    return data if isinstance(data, list) else []


def parse_rows(response: Any, model: Optional[Type[BaseModel]] = None) -> List[Any]:
    """Rows of a list envelope, validated into ``model`` when one is given.

    Rows that do not validate are skipped and logged.
    """
    rows = envelope_rows(response)
    if model is None:
        return list(rows)
    items = []
    for row in rows:
        try:
            items.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__} row: {e}")
    return items


def parse_one(response: Any, model: Type[BaseModel]) -> Optional[BaseModel]:
    """The ``data`` object of an envelope as ``model``, or None."""
    data = response.get("data") if isinstance(response, dict) else None
    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Malformed {model.__name__} payload: {e}")
        return None


class ListPanel:
    """A searchable list read model, fetched only while the panel is open.

    Subclasses set ``model`` to validate rows and ``search_fields`` to the
    row attributes the search box matches.
    """

    model: Optional[Type[BaseModel]] = None
    search_fields: Sequence[str] = ()

    def __init__(
        self,
        query_client: QueryClient,
        key: Any,
        fetcher: Fetcher,
        notifier: Optional[Notifier] = None,
        refetch_interval: Optional[float] = None,
    ):
        self.query_client = query_client
        self.notifier = notifier or Notifier()
        self.search = ""
        self.redirect_to: Optional[str] = None
        self.subscription = query_client.subscribe(
            make_key(key),
            fetcher,
            QueryOptions(refetch_interval=refetch_interval, enabled=False),
        )

    @property
    def rows(self) -> List[Any]:
        return parse_rows(self.subscription.data, self.model)

    @property
    def items(self) -> List[Any]:
        needle = (self.search or "").lower()
        if not needle or not self.search_fields:
            return self.rows
        return [row for row in self.rows if self._matches(row, needle)]

    @property
    def is_loading(self) -> bool:
        return self.subscription.state.is_loading

    def open(self) -> None:
        self.subscription.set_enabled(True)

    def close(self) -> None:
        self.subscription.set_enabled(False)

    def dispose(self) -> None:
        self.subscription.unsubscribe()

    async def _run(self, mutation: Mutation, fallback: str, *args: Any) -> bool:
        """Run a row action; 401 redirects, other failures toast."""
        self.redirect_to = None
        try:
            await mutation.mutate(*args)
        except UnauthorizedError as e:
            self.redirect_to = handle_unauthorized(e, self.notifier)
            self.close()
            return False
        except PortalError as e:
            self.notifier.error(e, fallback=fallback)
            return False
        return True

    def _matches(self, row: Any, needle: str) -> bool:
        for name in self.search_fields:
            value = row.get(name) if isinstance(row, dict) else getattr(row, name, None)
            if value is not None and needle in str(value).lower():
                return True
        return False
