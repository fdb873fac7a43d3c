ATTENDANCE_PREFIX = "/api/v1/attendance"

REGISTER_URL = f"{ATTENDANCE_PREFIX}/register"
LOOKUP_BY_CODE_URL = f"{ATTENDANCE_PREFIX}/lookup-by-code/{{code}}"
LOOKUP_BY_PHONE_URL = f"{ATTENDANCE_PREFIX}/lookup-by-phone"
LOOKUP_BY_CREDENTIAL_URL = f"{ATTENDANCE_PREFIX}/lookup-by-credential"
CHECK_IN_URL = f"{ATTENDANCE_PREFIX}/check-in/{{record_id}}"
STATS_URL = f"{ATTENDANCE_PREFIX}/stats"
RECORDS_URL = f"{ATTENDANCE_PREFIX}/records"
VERIFY_TOKEN_URL = f"{ATTENDANCE_PREFIX}/tokens/verify"
