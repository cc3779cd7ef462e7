# gator

`gator` is a small command-line RSS aggregator. Users register, add feeds,
follow feeds that others have added, and browse the most recent posts from
the feeds they follow. A long-running `agg` command scrapes one feed at a
time on a fixed interval and stores its posts in an SQLite database.

It uses only the Python standard library (Python 3.10 or later).

## Installation

```
pip install .
```

This installs the `gator` command.

## Configuration

`gator` reads its settings from `.gatorconfig.json` in your home directory.
The file must exist before `gator` is run; create it by hand:

```json
{
  "db_url": "/home/you/.gator.db",
  "current_user_name": ""
}
```

- `db_url` says where the SQLite database lives. It may be a file path,
  `:memory:`, a `sqlite:///path/to/file.db` URL or a `file:` URI. The tables
  are created the first time the database is opened.
- `current_user_name` is managed by `gator` itself: `register` and `login`
  rewrite the file with the new name.

## Usage

```
gator <command> [arguments...]
```

Running `gator` with no command, or with an unknown one, prints the list of
available commands. When a command fails, `gator` prints the error to
standard error and exits with status 1; on success it exits with status 0.

### Users

| Command                  | What it does                                                     |
|--------------------------|------------------------------------------------------------------|
| `gator register NAME`    | Register a new user and log in as them                           |
| `gator login NAME`       | Log in as an existing user                                       |
| `gator users`            | List registered users, marking the current one with `(current)`  |
| `gator reset`            | Delete all users, and with them their feeds, follows and posts   |

### Feeds

| Command                     | What it does                                             |
|-----------------------------|----------------------------------------------------------|
| `gator addfeed NAME URL`    | Add a feed for scraping and follow it                    |
| `gator feeds`               | List all feeds and the user who added each               |
| `gator follow URL`          | Follow a feed that has already been added                |
| `gator unfollow URL`        | Stop following a feed                                    |
| `gator following`           | List the feeds the current user follows                  |

A feed URL must be absolute (with a scheme such as `https:`), and each URL
can be added only once.

### Aggregating and reading

| Command                  | What it does                                                        |
|--------------------------|---------------------------------------------------------------------|
| `gator agg DURATION`     | Scrape feeds forever, one feed every `DURATION`                     |
| `gator browse [LIMIT]`   | Show the `LIMIT` most recent posts from followed feeds (default 2)  |

`DURATION` is written as a number followed by a unit (`ns`, `us`, `ms`, `s`,
`m`, `h`), and parts can be combined: `30s`, `1m`, `1h30m`, `1.5s`. It must
be greater than zero. `agg` runs until interrupted.

Each round, `agg` picks the feed that was fetched least recently (feeds never
fetched come first), downloads it and stores its items as posts. Post dates
are read in the usual RSS, RFC 822/850/1123, RFC 3339, ANSI C, Unix and Ruby
date formats; items whose date cannot be read are skipped with a warning, and
items whose link is already stored are ignored. HTML entities in titles and
descriptions are unescaped.

Commands that act on behalf of a user (`addfeed`, `follow`, `unfollow`,
`following`, `browse`) use the user currently logged in and fail if that
user is not registered.

## Example session

```
gator register alice
gator addfeed "Example Blog" https://blog.example.com/index.xml
gator agg 1m
gator browse 10
```

## Using it from Python

The pieces behind the commands can be used directly:

- `gator.config.read()` loads the configuration; `Config.set_user(name)`
  saves a new current user.
- `gator.database.connect(db_url)` returns a `Queries` object with methods
  such as `create_user`, `add_feed`, `add_feed_follow`, `add_post`,
  `get_next_feed_to_fetch` and `get_posts_for_user`. It can be used as a
  context manager, and `Queries.transaction()` groups queries into one
  transaction. Lookups that find nothing raise `gator.database.NoRowsError`.
- `gator.rss.fetch_feed(url)` downloads and parses a feed, `parse_feed(data)`
  parses an RSS document already in hand, and `parse_post_date(text)` reads a
  post date. Download and XML problems raise `gator.rss.FeedError`.
- `gator.feeds.scrape_feeds(state, fetch)` performs one scraping round and
  returns how many posts were saved.
- `gator.cli.build_commands()` returns the registry of all commands, and
  `gator.cli.main(argv)` runs one of them.

## What it does not do

- Storage is SQLite only; `db_url` cannot point at a database server.
- `gator` does not create the configuration file; it must already exist.
- `agg` runs in the foreground and scrapes one feed per interval; there is no
  background service, and only RSS (not Atom) documents are understood.

## Running the tests

```
pip install ".[test]"
pytest
```