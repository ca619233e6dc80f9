"""Central place for limits and defaults shared across the ledger."""

# Candidate names are limited to this many characters
MAX_NAME_LENGTH = 50

# A topic needs at least this many non-empty options to be created
MIN_TOPIC_OPTIONS = 2

# First id handed out by TopicRegistry.create_topic
FIRST_TOPIC_ID = 1

# Width (in characters) of the longest bar in a distribution chart
DISTRIBUTION_BAR_WIDTH = 50

# Default filenames used by the import/export formats
CANDIDATES_FILENAME = "candidates.csv"
VOTES_FILENAME = "votes.dat"
REPORT_FILENAME = "election_report.txt"
TOPIC_RECORDS_FILENAME = "topic_vote_records.csv"
TOPIC_FILENAME_TEMPLATE = "topic_{topic_id}.csv"

# Timeout (seconds) when fetching vote files over HTTP
HTTP_TIMEOUT = 30.0
