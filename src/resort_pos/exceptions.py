#   Copyright 2026 Resort POS Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Custom exceptions for the booking engine."""


class BookingError(Exception):
  """Base class for all booking engine exceptions."""

  def __init__(
      self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500
  ):
    self.message = message
    self.code = code
    self.status_code = status_code
    super().__init__(self.message)


class InvalidArgumentError(BookingError):
  """Raised when a numeric input is malformed or out of range."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_ARGUMENT", status_code=400)


class UnknownItemError(BookingError):
  """Raised when a ledger operation names an id not in the current catalog."""

  def __init__(self, message: str):
    super().__init__(message, code="UNKNOWN_ITEM", status_code=404)


class EmptySelectionError(BookingError):
  """Raised when checkout is attempted with nothing selected."""

  def __init__(self, message: str = "Please add items to the selection first"):
    super().__init__(message, code="EMPTY_SELECTION", status_code=409)


class SessionLockedError(BookingError):
  """Raised when the session is mutated during commit or after completion."""

  def __init__(self, message: str):
    super().__init__(message, code="SESSION_LOCKED", status_code=409)


class InvalidTransitionError(BookingError):
  """Raised when a checkout action is not valid in the current state."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_TRANSITION", status_code=409)


class SyncFailureError(BookingError):
  """Raised when the catalog (or tax rate) cannot be fetched."""

  def __init__(self, message: str):
    super().__init__(message, code="SYNC_FAILURE", status_code=502)


class CommitFailureError(BookingError):
  """Raised when the booking record could not be persisted."""

  def __init__(self, message: str):
    super().__init__(message, code="COMMIT_FAILURE", status_code=502)


class SessionNotFoundError(BookingError):
  """Raised when a requested booking session does not exist."""

  def __init__(self, message: str):
    super().__init__(message, code="SESSION_NOT_FOUND", status_code=404)


class ItemUnavailableError(BookingError):
  """Raised when an item marked unavailable is added to the selection."""

  def __init__(self, message: str):
    super().__init__(message, code="ITEM_UNAVAILABLE", status_code=409)
