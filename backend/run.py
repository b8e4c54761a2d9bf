from gameshow import create_app, initialize_store, socketio

app = create_app()
initialize_store(app)

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
