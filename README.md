# numbaseball

A two-player number baseball game played over TCP. Each player picks a
secret three-digit number with distinct digits (a leading zero is allowed).
The players then take turns guessing the other's number. Every guess is
scored in strikes, which are right digits in the right place, and balls,
which are right digits in the wrong place. The first player to score three
strikes wins, and both players are shown the two secret numbers.

The screens and messages are in Korean.

## Installation

```
pip install .
```

## Playing

Start the server on a port. It listens on all interfaces and logs to the
terminal:

```
numbaseball-server 8080
```

Each of the two players then connects to it:

```
numbaseball-client 127.0.0.1 8080
```

The game starts once both players are connected; the player who joined
first guesses first. These are the client commands:

| Command     | Effect                                        |
|-------------|-----------------------------------------------|
| `set 123`   | choose your secret number (distinct digits)   |
| `guess 456` | guess the opponent's number (on your turn)    |
| `help`      | show the rules                                |
| `quit`      | leave the game                                |

The client waits on the terminal and the socket together with `selectors`,
so it needs a POSIX system where standard input can be selected on.

If a player leaves while numbers are being set or guesses are being made,
the other player is told they have won. A third connection is refused with
an error message.

## Scoring examples

With the secret `123`:

- `120` scores 2 strikes and 0 balls
- `321` scores 1 strike and 2 balls
- `456` scores 0 strikes and 0 balls

## Wire protocol

Every message is a JSON object with an `"action"` field. On the wire it is
sent as a 2-byte big-endian length followed by the UTF-8 JSON text. A
received payload may be at most 4096 bytes long. The helpers in
`numbaseball.protocol` build and move these messages:

```python
from numbaseball.protocol import calculate_result, create_message, encode_message

result = calculate_result("123", "321")
print(result.strikes, result.balls, result.is_correct)

frame = encode_message(create_message("guess", guess="456"))
```

`send_message` and `recv_message` move one frame over a socket;
`recv_message` raises `ConnectionClosed` when the peer hangs up and
`ProtocolError` for a bad length or a body that is not JSON.

## Library use

- `numbaseball.game.GameManager` holds the rules and the match state. It
  does no network I/O of its own: it is given a `send` callable together
  with a clock and a sleep function, so it can run without sockets.
- `numbaseball.server.BaseballServer` binds a port, feeds connections to a
  `GameManager`, and runs until `close()` is called; it is also a context
  manager.
- `numbaseball.client.BaseballClient` turns command lines and server
  messages into screen text written to any text stream.
- `numbaseball.ui` returns the client's screens as strings.

## What it does not do

- Only one match is played per set of connections: after a win the server
  waits five seconds and resets the match, but a new game starts only when
  players connect again.
- `GameManager` has `check_timeouts()` and `send_heartbeats()`, but the
  server never calls them, so idle players are not dropped and no
  heartbeats are sent.
- There is no limit on the number of guesses.

## Running the tests

```
pip install .[test]
pytest
```