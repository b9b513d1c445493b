"""
Typed inputs for service operations

Request bodies arrive as loose dicts; each operation parses them into one of
these dataclasses first, so the service code only ever sees validated,
normalised values. Status values are passed through untouched: enum closure
and transition rules are enforced by app.services.transitions.
"""
from dataclasses import dataclass, field, fields
from typing import Optional

from app.errors import ValidationError
from app.models import DriverDocument, Notification, Message, Payment
from app.utils.validators import (
    validate_email,
    validate_url,
    require_text,
    optional_text,
    require_positive_amount,
    require_datetime,
    require_choice,
    require_range,
    require_coordinates,
    require_rating,
    MAX_RATE,
)


def _body(data):
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _email(value):
    if not isinstance(value, str) or not validate_email(value.strip()):
        raise ValidationError('Invalid email address')
    return value.strip().lower()


def _url(value, field_name):
    if not validate_url(value):
        raise ValidationError(f'{field_name} must be a valid URL')
    return value


def _optional_datetime(data, key):
    value = data.get(key)
    return None if value in (None, '') else require_datetime(value, key)


def _status(value):
    if not isinstance(value, str) or not value:
        raise ValidationError('status must be a non-empty string')
    return value


class PartialInput:
    """Update input: remembers which keys the caller actually supplied"""

    def changes(self):
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name in self.present}


# ============ USERS ============

@dataclass
class CreateUserInput:
    email: str
    first_name: str
    last_name: str
    role_id: str
    phone: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        password = data.get('password')
        if password is not None and (not isinstance(password, str) or len(password) < 8):
            raise ValidationError('Password must be at least 8 characters')
        return cls(
            email=_email(data.get('email')),
            first_name=require_text(data, 'first_name', 'First name'),
            last_name=require_text(data, 'last_name', 'Last name'),
            role_id=require_text(data, 'role_id', 'Role'),
            phone=optional_text(data, 'phone'),
            password=password,
        )


@dataclass
class UpdateUserInput(PartialInput):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    status: Optional[str] = None
    present: frozenset = field(default_factory=frozenset, repr=False)

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        values = {}
        if 'email' in data:
            values['email'] = _email(data['email'])
        if 'first_name' in data:
            values['first_name'] = require_text(data, 'first_name', 'First name')
        if 'last_name' in data:
            values['last_name'] = require_text(data, 'last_name', 'Last name')
        if 'phone' in data:
            values['phone'] = optional_text(data, 'phone')
        if 'avatar_url' in data:
            values['avatar_url'] = _url(data['avatar_url'], 'avatar_url') if data['avatar_url'] else None
        if 'status' in data:
            values['status'] = _status(data['status'])
        return cls(present=frozenset(values), **values)


# ============ DRIVERS ============

@dataclass
class CreateDriverInput:
    user_id: str
    license_number: str
    license_class: Optional[str] = None
    license_expiry: Optional[object] = None
    vehicle_type: Optional[str] = None
    vehicle_vin: Optional[str] = None
    vehicle_plate: Optional[str] = None
    status: str = 'active'

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        if 'rating' in data:
            raise ValidationError('rating is derived from driver ratings and cannot be set directly')
        return cls(
            user_id=require_text(data, 'user_id', 'User ID'),
            license_number=require_text(data, 'license_number', 'License number'),
            license_class=optional_text(data, 'license_class'),
            license_expiry=_optional_datetime(data, 'license_expiry'),
            vehicle_type=optional_text(data, 'vehicle_type'),
            vehicle_vin=optional_text(data, 'vehicle_vin'),
            vehicle_plate=optional_text(data, 'vehicle_plate'),
            status=_status(data['status']) if 'status' in data else 'active',
        )


@dataclass
class UpdateDriverInput(PartialInput):
    license_number: Optional[str] = None
    license_class: Optional[str] = None
    license_expiry: Optional[object] = None
    vehicle_type: Optional[str] = None
    vehicle_vin: Optional[str] = None
    vehicle_plate: Optional[str] = None
    status: Optional[str] = None
    present: frozenset = field(default_factory=frozenset, repr=False)

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        if 'rating' in data:
            raise ValidationError('rating is derived from driver ratings and cannot be set directly')
        values = {}
        if 'license_number' in data:
            values['license_number'] = require_text(data, 'license_number', 'License number')
        for key in ('license_class', 'vehicle_type', 'vehicle_vin', 'vehicle_plate'):
            if key in data:
                values[key] = optional_text(data, key)
        if 'license_expiry' in data:
            values['license_expiry'] = _optional_datetime(data, 'license_expiry')
        if 'status' in data:
            values['status'] = _status(data['status'])
        return cls(present=frozenset(values), **values)


@dataclass
class CreateDriverDocumentInput:
    type: str
    document_url: str
    expiry_date: Optional[object] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        return cls(
            type=require_choice(data.get('type'), DriverDocument.TYPES, 'type'),
            document_url=_url(data.get('document_url'), 'document_url'),
            expiry_date=_optional_datetime(data, 'expiry_date'),
        )


@dataclass
class LocationInput:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        if data.get('latitude') is None or data.get('longitude') is None:
            raise ValidationError('latitude and longitude are required')
        latitude, longitude = require_coordinates(data['latitude'], data['longitude'])
        accuracy = data.get('accuracy')
        if accuracy is not None:
            accuracy = require_range(accuracy, 0, float('inf'), 'accuracy')
        return cls(latitude=latitude, longitude=longitude, accuracy=accuracy)


@dataclass
class RatingInput:
    rating: int
    comment: Optional[str] = None
    load_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        if data.get('rating') is None:
            raise ValidationError('rating is required')
        return cls(
            rating=require_rating(data['rating']),
            comment=optional_text(data, 'comment'),
            load_id=optional_text(data, 'load_id'),
        )


# ============ LOADS ============

LOAD_ADDRESS_FIELDS = (
    'pickup_address', 'pickup_city', 'pickup_state', 'pickup_zip',
    'delivery_address', 'delivery_city', 'delivery_state', 'delivery_zip',
)


def _weight(value):
    return None if value is None else require_range(value, 0, float('inf'), 'weight')


@dataclass
class CreateLoadInput:
    reference_number: str
    pickup_address: str
    pickup_city: str
    pickup_state: str
    pickup_zip: str
    pickup_date: object
    delivery_address: str
    delivery_city: str
    delivery_state: str
    delivery_zip: str
    delivery_date: object
    rate: object
    commodity: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    hazmat: bool = False
    special_handling: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        values = {key: require_text(data, key) for key in LOAD_ADDRESS_FIELDS}
        values['reference_number'] = require_text(data, 'reference_number', 'Reference number')
        values['pickup_date'] = require_datetime(data.get('pickup_date'), 'pickup_date')
        values['delivery_date'] = require_datetime(data.get('delivery_date'), 'delivery_date')
        if values['delivery_date'] < values['pickup_date']:
            raise ValidationError('delivery_date cannot be before pickup_date')
        values['rate'] = require_positive_amount(data.get('rate'), 'rate', maximum=MAX_RATE)
        values['commodity'] = optional_text(data, 'commodity')
        values['weight'] = _weight(data.get('weight'))
        values['dimensions'] = optional_text(data, 'dimensions')
        values['hazmat'] = bool(data.get('hazmat', False))
        values['special_handling'] = optional_text(data, 'special_handling')
        return cls(**values)


@dataclass
class UpdateLoadInput(PartialInput):
    status: Optional[str] = None
    pickup_date: Optional[object] = None
    delivery_date: Optional[object] = None
    rate: Optional[object] = None
    commodity: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    hazmat: Optional[bool] = None
    special_handling: Optional[str] = None
    present: frozenset = field(default_factory=frozenset, repr=False)

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        values = {}
        if 'status' in data:
            values['status'] = _status(data['status'])
        for key in ('pickup_date', 'delivery_date'):
            if key in data:
                values[key] = require_datetime(data[key], key)
        if 'rate' in data:
            values['rate'] = require_positive_amount(data['rate'], 'rate', maximum=MAX_RATE)
        for key in ('commodity', 'dimensions', 'special_handling'):
            if key in data:
                values[key] = optional_text(data, key)
        if 'weight' in data:
            values['weight'] = _weight(data['weight'])
        if 'hazmat' in data:
            values['hazmat'] = bool(data['hazmat'])
        return cls(present=frozenset(values), **values)


@dataclass
class TrackingInput:
    status: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        latitude = data.get('latitude')
        longitude = data.get('longitude')
        if latitude is not None:
            latitude = require_range(latitude, -90, 90, 'latitude')
        if longitude is not None:
            longitude = require_range(longitude, -180, 180, 'longitude')
        return cls(
            status=_status(data.get('status')),
            latitude=latitude,
            longitude=longitude,
            notes=optional_text(data, 'notes'),
        )


@dataclass
class LoadDocumentInput:
    type: str
    url: str

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        return cls(
            type=require_text(data, 'type', 'Type'),
            url=_url(data.get('url'), 'url'),
        )


# ============ INVOICES & PAYMENTS ============

@dataclass
class CreateInvoiceInput:
    invoice_number: str
    amount: object
    due_date: object
    driver_id: Optional[str] = None
    load_id: Optional[str] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    status: str = 'pending'

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        return cls(
            invoice_number=require_text(data, 'invoice_number', 'Invoice number'),
            amount=require_positive_amount(data.get('amount')),
            due_date=require_datetime(data.get('due_date'), 'due_date'),
            driver_id=optional_text(data, 'driver_id'),
            load_id=optional_text(data, 'load_id'),
            currency=optional_text(data, 'currency'),
            description=optional_text(data, 'description'),
            notes=optional_text(data, 'notes'),
            status=_status(data['status']) if 'status' in data else 'pending',
        )


@dataclass
class UpdateInvoiceInput(PartialInput):
    status: Optional[str] = None
    amount: Optional[object] = None
    due_date: Optional[object] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    present: frozenset = field(default_factory=frozenset, repr=False)

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        values = {}
        if 'status' in data:
            values['status'] = _status(data['status'])
        if 'amount' in data:
            values['amount'] = require_positive_amount(data['amount'])
        if 'due_date' in data:
            values['due_date'] = require_datetime(data['due_date'], 'due_date')
        for key in ('description', 'notes'):
            if key in data:
                values[key] = optional_text(data, key)
        return cls(present=frozenset(values), **values)


@dataclass
class CreatePaymentInput:
    invoice_id: str
    amount: object
    method: str
    status: str = 'pending'
    transaction_id: Optional[str] = None
    currency: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        return cls(
            invoice_id=require_text(data, 'invoice_id', 'Invoice ID'),
            amount=require_positive_amount(data.get('amount')),
            method=require_choice(data.get('method'), Payment.METHODS, 'method'),
            status=_status(data['status']) if 'status' in data else 'pending',
            transaction_id=optional_text(data, 'transaction_id'),
            currency=optional_text(data, 'currency'),
        )


@dataclass
class UpdatePaymentInput(PartialInput):
    amount: Optional[object] = None
    method: Optional[str] = None
    status: Optional[str] = None
    transaction_id: Optional[str] = None
    present: frozenset = field(default_factory=frozenset, repr=False)

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        values = {}
        if 'amount' in data:
            values['amount'] = require_positive_amount(data['amount'])
        if 'method' in data:
            values['method'] = require_choice(data['method'], Payment.METHODS, 'method')
        if 'status' in data:
            values['status'] = _status(data['status'])
        if 'transaction_id' in data:
            values['transaction_id'] = optional_text(data, 'transaction_id')
        return cls(present=frozenset(values), **values)


# ============ COMMUNICATION ============

@dataclass
class CreateNotificationInput:
    user_id: str
    type: str
    title: str
    message: str
    link: Optional[str] = None
    data: Optional[dict] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        extra = data.get('data')
        if extra is not None and not isinstance(extra, dict):
            raise ValidationError('data must be an object')
        return cls(
            user_id=require_text(data, 'user_id', 'User ID'),
            type=require_choice(data.get('type'), Notification.TYPES, 'type'),
            title=require_text(data, 'title', 'Title'),
            message=require_text(data, 'message', 'Message'),
            link=_url(data['link'], 'link') if data.get('link') else None,
            data=extra,
        )


@dataclass
class CreateConversationInput:
    name: Optional[str] = None
    is_group: bool = False
    participant_ids: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        participant_ids = data.get('participant_ids') or []
        if not isinstance(participant_ids, list) or not all(isinstance(p, str) and p for p in participant_ids):
            raise ValidationError('participant_ids must be a list of user ids')
        return cls(
            name=optional_text(data, 'name'),
            is_group=bool(data.get('is_group', False)),
            participant_ids=list(dict.fromkeys(participant_ids)),
        )


@dataclass
class SendMessageInput:
    content: str
    recipient_id: Optional[str] = None
    message_type: str = 'text'
    attachment_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        data = _body(data)
        if not isinstance(data.get('content'), str) or not data['content'].strip():
            raise ValidationError('Message cannot be empty')
        return cls(
            content=data['content'],
            recipient_id=optional_text(data, 'recipient_id'),
            message_type=require_choice(data.get('message_type', 'text'), Message.TYPES, 'message_type'),
            attachment_url=_url(data['attachment_url'], 'attachment_url') if data.get('attachment_url') else None,
        )
