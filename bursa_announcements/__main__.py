from bursa_announcements.server import main

main()
