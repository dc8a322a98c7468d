from logokit.main import main

main()
