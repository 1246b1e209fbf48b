# apps/utils/validation.py


class ValidationResult:
    """
    Collects (message, code) pairs while an order, item or variation
    checks itself. Results from nested objects merge with ``+=``.
    """

    def __init__(self, errors=None):
        self.errors = list(errors or [])

    def add_error(self, message, code=None):
        self.errors.append((message, code))
        return self

    def is_valid(self):
        return not self.errors

    @property
    def messages(self):
        return [message for message, _ in self.errors]

    @property
    def codes(self):
        return [code for _, code in self.errors]

    def has_code(self, code):
        return code in self.codes

    def first_message(self):
        return self.errors[0][0] if self.errors else ""

    def __iadd__(self, other):
        self.errors.extend(other.errors)
        return self

    def __bool__(self):
        return self.is_valid()

    def __repr__(self):
        return f"<ValidationResult errors={self.errors!r}>"
