from fastapi import Depends
from auth.security import get_current_client
from services.ids import get_id_generator

# --- DEPENDENCY INJECTION SETUP ---
CLIENT_AUTH = Depends(get_current_client)
# Tests override get_id_generator to get deterministic ids
ID_GENERATOR = Depends(get_id_generator)
