import logging
import json
import datetime


class JSONFormatter(logging.Formatter):
    """
    JSON log lines for the console handler.
    Sensitive keys are redacted before anything is serialised.
    """

    SENSITIVE_KEYS = {
        'password', 'password_confirm', 'token', 'secret',
        'authorization', 'key', 'signature', 'card_number', 'cvv',
    }

    CONTEXT_FIELDS = ('order_id', 'user_id', 'payment_id', 'standing_order_id')

    def _scrub(self, data):
        if isinstance(data, dict):
            return {
                k: self._scrub(v) if str(k).lower() not in self.SENSITIVE_KEYS else '***REDACTED***'
                for k, v in data.items()
            }
        if isinstance(data, (list, tuple)):
            return [self._scrub(i) for i in data]
        return data

    def format(self, record):
        if isinstance(record.msg, dict):
            record.msg = self._scrub(record.msg)

        if isinstance(record.args, dict):
            record.args = self._scrub(record.args)

        log_record = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "lvl": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "path": record.pathname,
            "line": record.lineno,
        }

        for field in self.CONTEXT_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)

        if record.exc_info:
            log_record['exc'] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)
