"""Constants shared by the certificate client modules."""

VERSION = "0.1.0"

CERT_REQUESTS_PATH = "cert/requests/"

PUBLIC_KEY_SUFFIX = ".pub"
CERT_SUFFIX = "-cert.pub"

# ssh-add -t rejects lifetimes that overflow a signed 32-bit int.
MAX_AGENT_LIFETIME = 2**31 - 1
