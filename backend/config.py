import os
import secrets

# Short readable ids (A-Z, 2-9) without 0/O/1/I
INSTANCE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_instance_id(length=4):
    return ''.join(secrets.choice(INSTANCE_ALPHABET) for _ in range(length))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///tictactoe.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    INSTANCE_ID = os.environ.get('INSTANCE_ID') or generate_instance_id()
    # Display names are stored in a VARCHAR(64)
    NAME_MAX_LENGTH = int(os.environ.get('NAME_MAX_LENGTH', '64'))
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '10'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # '*' or a comma-separated list of origins
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
