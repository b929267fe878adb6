# Client -> server
ROOM_JOIN = "room:join"
PLAYER_READY = "player:ready"
GAME_START = "game:start"
ITEM_SELECT = "item:select"
VOTE_CAST = "vote:cast"

# Server -> client
ROOM_STATE = "room:state"
ROOM_MESSAGE = "room:message"
ROOM_ERROR = "room:error"
