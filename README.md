# thirdrail

An HTTP API that serves MARTA rail data: live train schedules by line or
station, service alerts, station, line and direction listings, the stations
nearest to a point, and parking and emergency updates gathered from Twitter
searches.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Preparing the database

Stations, lines, directions, aliases and schedule events are kept in a
relational database reached through an SQLAlchemy connection string
(`postgres://` URLs are accepted and read as `postgresql://`). Create the
tables and load the seed data — two schedule event sources, four directions,
the four rail lines and all 38 stations with their geohash locations and
aliases — with:

```
third-rail-dbinit --db-connection-string sqlite:///thirdrail.db
```

Run it once, on an empty database: the seed data is inserted, not merged, so a
second run fails on the unique station names. The command exits with status 1
if the database cannot be reached, migrated or seeded.

## Running the server

```
third-rail \
    --db-connection-string sqlite:///thirdrail.db \
    --marta-api-key placeholder \
    --twitter-client-id placeholder \
    --twitter-client-secret placeholder
```

The server listens on port 5000 on all interfaces. A MARTA API key and Twitter
client credentials are required; without them the command logs the problem
and exits with status 1. One trailing slash on a request path is ignored, and
CORS is open to every origin. Log lines are written as JSON.

### Options

Every option can also be given through the environment variable shown; a
command-line flag wins over the environment.

| Option | Environment variable | Default |
| --- | --- | --- |
| `--twitter-client-id` | `TWITTER_CLIENT_ID` | |
| `--twitter-client-secret` | `TWITTER_CLIENT_SECRET` | |
| `--marta-api-key` | `MARTA_API_KEY` | |
| `--twitter-cache-ttl` | `TWITTER_CACHE_TTL` | `15` (seconds) |
| `--marta-cache-ttl` | `MARTA_CACHE_TTL` | `15` (seconds) |
| `--db-connection-string` | `DB_CONNECTION_STRING` | |
| `--admin-api-key` | `ADMIN_API_KEY` | |
| `--service-domain` | `SERVICE_DOMAIN` | `third-rail.services.smartatransit.com` |
| `--rail-runner` | `RAIL_RUNNER` | off |

A cache TTL below 1 turns caching of upstream answers off. `RAIL_RUNNER`
accepts `1`, `t`, `true` (any of `true`, `True`, `TRUE`) and the matching false
spellings. `--service-domain` is read but not otherwise used by the server.

With `--rail-runner` the server also fetches real-time train events from
MARTA every 15 seconds in a background thread and stores each one as a
schedule event with its real-time detail, matching station and direction
names against the seeded data and its aliases.

## Endpoints

All responses are JSON.

| Method | Path | Returns |
| --- | --- | --- |
| GET | `/live/schedule/line/{line}` | live schedule for a line (`RED`, `GOLD`, `BLUE`, `GREEN`, any case) |
| GET | `/live/schedule/station/{station}` | live schedule for a station, by the name MARTA reports |
| GET | `/live/alerts` | current bus and rail alerts |
| GET | `/static/schedule/station?schedule=…&station_name=…` | `{"data": null}`; 422 if either parameter is missing |
| GET | `/static/lines` | all lines |
| GET | `/static/directions` | all directions |
| GET | `/static/stations` | all stations with their lines |
| GET | `/static/stations/location?latitude=…&longitude=…` | stations ordered nearest first, distance in feet |
| GET | `/smart/station/{id}` | a station with the latest recorded train estimates |
| GET | `/smart/parking` | parking updates from `from:@martaservice #parkingupdate` |
| GET | `/smart/emergencies` | updates from `from:@martapolice` |
| GET | `/rider/alerts` | the Midtown station record |
| POST | `/admin/event/ingest` | checks a train event; requires the admin key in the `key` header |

An invalid `latitude` or `longitude` on the location endpoint gives a 400
response whose body holds an `id` (1 for latitude, 2 for longitude) and a
`message`.

## Using it as a library

The pieces the server is built from can be used directly. The geohash decoder
and the great-circle distance used to order stations:

```python
from thirdrail.geohash import decode
from thirdrail.transformers import calculate_distance

lat, lon = decode("dn5bptxy8r41")
feet = calculate_distance(33.782840, -84.387830, lat, lon)
```

Coercing free-form names to canonical ones:

```python
from thirdrail.validators import EntityType, MartaEntitiesValidator

MartaEntitiesValidator().coerce(EntityType.STATIONS, "Midtown")  # "Midtown Station"
```

`thirdrail.app.App` can be built with an existing SQLAlchemy engine and any
objects providing the client methods, such as
`thirdrail.clients.MartaAPITestClient` and `TwitterTestClient`, whose answers
come from callables you pass in. Mount the routes you need
(`mount_live_routes`, `mount_static_routes`, `mount_smart_routes`, …) and
exercise `app.router`, a Flask application, with its test client.

## What it does not do

- `/smart/station/{id}` needs a store of recorded estimates (an object with a
  `get_latest_estimates(station_id)` method passed to `App` as `sd_client`).
  The `third-rail` command does not configure one, so there that endpoint
  answers 500.
- There is no timetable data: the static schedule endpoint only checks its
  parameters.
- The admin ingest endpoint validates the event but does not store it.
- No interactive API documentation is served.