"""
Page handlers for contacts
"""
from math import ceil
from typing import Any, Dict, Mapping, Optional

from contactbook.core.exceptions import ContactNotFoundError, StoreOperationError, ValidationError
from contactbook.core.logging_config import LoggingConfig
from contactbook.core.routing import RequestContext, Router
from contactbook.core.templates import PageRenderer, format_datetime_input, redirect
from contactbook.core.validation import Validator
from contactbook.models.contact import Contact
from contactbook.services.contact_repository import ContactRepository

logger = LoggingConfig.get_logger(__name__)

LIST_PATH = "/contacts"

FORM_FIELDS = ("name", "email", "phone", "title", "created")

CONTACT_RULES = {
    "name": ["required", "max:255"],
    "email": ["required", "email", "max:255"],
    "phone": ["required", "max:20"],
    "title": ["max:255"],
    "created": ["datetime"],
}

# Upper bound of the 32-bit Integer id column
MAX_CONTACT_ID = 2**31 - 1


def parse_contact_id(raw: Optional[str]) -> Optional[int]:
    """Path ids must be positive integers that fit the id column; anything else is treated as missing"""
    if raw is None or not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    return value if 0 < value <= MAX_CONTACT_ID else None


def parse_page(raw: Optional[str]) -> int:
    """Page numbers start at 1; junk or values below 1 fall back to 1"""
    try:
        page = int(raw) if raw is not None else 1
    except ValueError:
        return 1
    return max(page, 1)


def form_values(body: Mapping[str, Any]) -> Dict[str, str]:
    """Submitted contact fields only; an id in the body is never read"""
    return {name: str(body.get(name) or "") for name in FORM_FIELDS}


def contact_values(contact: Contact) -> Dict[str, str]:
    return {
        "name": contact.name or "",
        "email": contact.email or "",
        "phone": contact.phone or "",
        "title": contact.title or "",
        "created": format_datetime_input(contact.created),
    }


class ContactController:
    """
    Handlers for the contact pages.

    Every handler takes (params, ctx) and returns a response. Mutating pages
    either show their form (GET, or invalid POST) or apply the change and
    redirect to the list.
    """

    def __init__(
        self,
        repository: ContactRepository,
        renderer: PageRenderer,
        validator: Optional[Validator] = None,
        page_size: int = 5,
    ):
        self.repository = repository
        self.renderer = renderer
        self.validator = validator or Validator(CONTACT_RULES)
        self.page_size = page_size

    def register(self, router: Router) -> Router:
        """Attach the contact pages to a router"""
        router.get("/", self.home)
        router.get("/contacts", self.index)
        router.get("/contacts/create", self.create)
        router.post("/contacts/create", self.create)
        router.get("/contacts/show/{id}", self.show)
        router.get("/contacts/edit/{id}", self.edit)
        router.post("/contacts/update/{id}", self.update)
        router.get("/contacts/delete/{id}", self.delete)
        return router

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _load(self, params: Mapping[str, str]) -> Contact:
        contact_id = parse_contact_id(params.get("id"))
        contact = self.repository.get_by_id(contact_id) if contact_id else None
        if contact is None:
            raise ContactNotFoundError(params.get("id"))
        return contact

    def _not_found(self, ctx: RequestContext, error: ContactNotFoundError):
        logger.info(str(error), extra={"contact_id": error.contact_id})
        ctx.flash.error(error.user_message)
        return redirect(LIST_PATH)

    def _validated(self, ctx: RequestContext) -> Dict[str, str]:
        values = form_values(ctx.body)
        self.validator.validate(values).raise_for_errors()
        return values

    def _form(self, ctx, values, errors=None, contact=None, status_code=200):
        action = f"/contacts/update/{contact.id}" if contact else "/contacts/create"
        return self.renderer.render(
            ctx,
            "contacts/form.html",
            {
                "contact": contact,
                "values": values,
                "errors": errors or {},
                "action": action,
            },
            status_code=status_code,
        )

    # ------------------------------------------------------------------
    # handlers
    # ------------------------------------------------------------------

    def home(self, params, ctx: RequestContext):
        return self.renderer.render(ctx, "home.html", {"total": self.repository.count()})

    def index(self, params, ctx: RequestContext):
        """Paged list; pages past the end are simply empty"""
        page = parse_page(ctx.query.get("page"))
        offset = (page - 1) * self.page_size

        total = self.repository.count()
        # Offsets past the last row never reach the store
        if offset < total:
            contacts = self.repository.list_page(limit=self.page_size, offset=offset)
        else:
            contacts = []

        return self.renderer.render(
            ctx,
            "contacts/list.html",
            {
                "contacts": contacts,
                "total": total,
                "page": page,
                "pages": max(1, ceil(total / self.page_size)),
                "page_size": self.page_size,
            },
        )

    def create(self, params, ctx: RequestContext):
        if ctx.method != "POST":
            return self._form(ctx, form_values({}))

        try:
            values = self._validated(ctx)
        except ValidationError as e:
            return self._form(ctx, form_values(ctx.body), errors=e.errors)

        try:
            contact = self.repository.create(values)
        except StoreOperationError as e:
            ctx.flash.error(e.user_message)
            return self._form(ctx, values)

        ctx.flash.success(f"Contact '{contact.name}' created.")
        return redirect(LIST_PATH)

    def show(self, params, ctx: RequestContext):
        try:
            contact = self._load(params)
        except ContactNotFoundError as e:
            return self._not_found(ctx, e)
        return self.renderer.render(ctx, "contacts/show.html", {"contact": contact})

    def edit(self, params, ctx: RequestContext):
        try:
            contact = self._load(params)
        except ContactNotFoundError as e:
            return self._not_found(ctx, e)
        return self._form(ctx, contact_values(contact), contact=contact)

    def update(self, params, ctx: RequestContext):
        try:
            contact = self._load(params)
        except ContactNotFoundError as e:
            return self._not_found(ctx, e)

        try:
            values = self._validated(ctx)
        except ValidationError as e:
            return self._form(ctx, form_values(ctx.body), errors=e.errors, contact=contact)

        try:
            updated = self.repository.update(contact.id, values)
        except StoreOperationError as e:
            ctx.flash.error(e.user_message)
            return self._form(ctx, values, contact=contact)

        if not updated:
            # Deleted between the lookup and the write
            return self._not_found(ctx, ContactNotFoundError(contact.id))

        ctx.flash.success(f"Contact '{values['name']}' updated.")
        return redirect(LIST_PATH)

    def delete(self, params, ctx: RequestContext):
        try:
            contact = self._load(params)
        except ContactNotFoundError as e:
            return self._not_found(ctx, e)

        if ctx.query.get("confirm") != "yes":
            return self.renderer.render(ctx, "contacts/delete.html", {"contact": contact})

        try:
            deleted = self.repository.delete(contact.id)
        except StoreOperationError as e:
            ctx.flash.error(e.user_message)
            return redirect(LIST_PATH)

        if not deleted:
            return self._not_found(ctx, ContactNotFoundError(contact.id))

        ctx.flash.success(f"Contact '{contact.name}' deleted.")
        return redirect(LIST_PATH)
