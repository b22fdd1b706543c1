from reflexboard import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server so live leaderboard updates work in dev
    socketio.run(app, host='0.0.0.0', port=app.config['PORT'], debug=True)
